# sonos-upnp
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Player — one Sonos speaker on the network.

Lifecycle:

    player = Player({"address": "10.0.0.5",
                     "location": "http://10.0.0.5:1400/xml/device_description.xml"})
    player.on("ready", ...)
    player.on("error", ...)      # always subscribe before init()
    player.init()                # fetch description in the background

    uninitialized → initializing → ready → (refreshed)* → expired
                                 ↘ error (terminal)

Events (pyee):
    ready       ()           description merged, sub-services built, timer armed
    error       (exc)        description fetch failed; player is unusable
    refreshed   ()           expiration pushed out by refresh()
    expired     ()           timer ran out without a refresh()

Command methods are coroutines that return the parsed action reply unchanged
and let UpnpError/ActionError propagate.  They are only meaningful after
``ready``; nothing here guards against earlier calls.
"""

import asyncio
import logging
from collections.abc import Mapping

import pyee

from ..devices import MediaRenderer, MediaServer
from ..lib.config import cfg
from ..lib.upnp import ActionInvoker, UpnpClient
from ..services import (AlarmClock, DeviceProperties, GroupManagement, MusicServices,
                        QPlay, SystemProperties, ZoneGroupTopology)

log = logging.getLogger(__name__)

# Sonos announces ssdp:alive well inside this window
EXPIRE_SECONDS = cfg("player", "expire_seconds", default=1800)


class Player(pyee.EventEmitter):

    def __init__(self, info: Mapping, upnp: UpnpClient | None = None):
        super().__init__()
        self.info: dict = dict(info)
        self._address: str = self.info["address"]
        self._location: str = self.info["location"]
        self._owns_upnp = upnp is None
        self._upnp = upnp if upnp is not None else UpnpClient()
        self._invoke = ActionInvoker(self._upnp, self._address)
        self._expire_handle: asyncio.TimerHandle | None = None

        # Populated once by a successful init()
        self.attributes: dict | None = None

        # player services
        self.alarm_clock: AlarmClock | None = None
        self.device_properties: DeviceProperties | None = None
        self.group_management: GroupManagement | None = None
        self.music_services: MusicServices | None = None
        self.system_properties: SystemProperties | None = None
        self.qplay: QPlay | None = None
        self.zone_group_topology: ZoneGroupTopology | None = None

        # player devices
        self.media_renderer: MediaRenderer | None = None
        self.media_server: MediaServer | None = None

    def __repr__(self):
        name = (self.attributes or {}).get("roomName") or self.info.get("name", "")
        return f"<Player {self._address} {name!r}>" if name else f"<Player {self._address}>"

    @property
    def address(self) -> str:
        return self._address

    @property
    def location(self) -> str:
        return self._location

    @property
    def expiring(self) -> bool:
        """True while an expiration is pending."""
        return self._expire_handle is not None

    @property
    def expires_at(self) -> float | None:
        """Loop time at which the pending expiration fires, or None."""
        return self._expire_handle.when() if self._expire_handle else None

    # ── Lifecycle ──

    def init(self) -> asyncio.Task:
        """Start fetching the description; returns the background task.

        Outcome is reported through ``ready`` / ``error``, never raised here.
        """
        return asyncio.get_running_loop().create_task(self._init())

    async def _init(self):
        log.info("Player %s: fetching description from %s", self._address, self._location)
        try:
            response = await self._upnp.get(self._location)
            attributes = dict(response["device"])
        except Exception as e:
            log.warning("Player %s: init failed: %s", self._address, e)
            self.emit("error", e)
            return

        self.attributes = attributes

        # player services
        self.alarm_clock = AlarmClock(self._invoke)
        self.device_properties = DeviceProperties(self._invoke)
        self.group_management = GroupManagement(self._invoke)
        self.music_services = MusicServices(self._invoke)
        self.system_properties = SystemProperties(self._invoke)
        self.qplay = QPlay(self._invoke)
        self.zone_group_topology = ZoneGroupTopology(self._invoke)

        # player devices
        self.media_renderer = MediaRenderer(self._invoke)
        self.media_server = MediaServer(self._invoke)

        # Arms the same timer refresh() would, but refresh() itself would emit
        # refreshed before ready.  Listeners must see ready first, so the
        # refreshed for this arming is emitted by hand after it.
        self._schedule_expire(EXPIRE_SECONDS)
        log.info("Player %s ready (%s)", self._address,
                 attributes.get("roomName") or attributes.get("modelName", "?"))
        self.emit("ready")
        self.emit("refreshed")

    def refresh(self, seconds: float = EXPIRE_SECONDS):
        """Push the expiration *seconds* out; called on every presence signal."""
        self._schedule_expire(seconds)
        log.debug("Player %s refreshed (expires in %ss)", self._address, seconds)
        self.emit("refreshed")

    def _schedule_expire(self, seconds: float):
        if self._expire_handle is not None:
            self._expire_handle.cancel()
        loop = asyncio.get_running_loop()
        self._expire_handle = loop.call_later(seconds, self.expire)

    def expire(self):
        """Timer callback. Only signals; attributes and services are kept."""
        self._expire_handle = None
        log.info("Player %s expired", self._address)
        self.emit("expired")

    def cancel_expire(self):
        """Cancel any pending expiration without emitting anything."""
        if self._expire_handle is not None:
            self._expire_handle.cancel()
            self._expire_handle = None

    async def close(self):
        """Cancel the timer and release the UPnP client if this player built it.

        An injected client is left alone; its owner (usually a
        PlayerRegistry) closes it.
        """
        self.cancel_expire()
        if self._owns_upnp:
            await self._upnp.close()

    # ── DeviceProperties passthrough ──

    async def set_led_state(self, state: str | bool) -> dict:
        return await self.device_properties.set_led_state(state)

    async def get_led_state(self) -> dict:
        return await self.device_properties.get_led_state()

    # ── RenderingControl ──

    async def get_volume(self, instance_id: int = 0, channel: str = "Master") -> dict:
        return await self._do_action("GetVolume", {
            "InstanceID": instance_id,
            "Channel": channel,
        })

    async def set_volume(self, desired_volume: int = 30, instance_id: int = 0,
                         channel: str = "Master") -> dict:
        return await self._do_action("SetVolume", {
            "InstanceID": instance_id,
            "Channel": channel,
            "DesiredVolume": desired_volume,
        })

    async def get_mute(self, instance_id: int = 0, channel: str = "Master") -> dict:
        return await self._do_action("GetMute", {
            "InstanceID": instance_id,
            "Channel": channel,
        })

    async def set_mute(self, desired_mute: bool = True, instance_id: int = 0,
                       channel: str = "Master") -> dict:
        return await self._do_action("SetMute", {
            "InstanceID": instance_id,
            "Channel": channel,
            "DesiredMute": desired_mute,
        })

    # ── AVTransport ──

    async def get_media_info(self, instance_id: int = 0) -> dict:
        return await self._do_action("GetMediaInfo", {"InstanceID": instance_id})

    async def get_transport_info(self, instance_id: int = 0) -> dict:
        return await self._do_action("GetTransportInfo", {"InstanceID": instance_id})

    async def get_position_info(self, instance_id: int = 0) -> dict:
        return await self._do_action("GetPositionInfo", {"InstanceID": instance_id})

    async def get_device_capabilities(self, instance_id: int = 0) -> dict:
        return await self._do_action("GetDeviceCapabilities", {"InstanceID": instance_id})

    async def get_transport_settings(self, instance_id: int = 0) -> dict:
        return await self._do_action("GetTransportSettings", {"InstanceID": instance_id})

    async def get_crossfade_mode(self, instance_id: int = 0) -> dict:
        return await self._do_action("GetCrossfadeMode", {"InstanceID": instance_id})

    async def set_crossfade_mode(self, crossfade_mode: bool = False,
                                 instance_id: int = 0) -> dict:
        return await self._do_action("SetCrossfadeMode", {
            "InstanceID": instance_id,
            "CrossfadeMode": crossfade_mode,
        })

    async def set_play_mode(self, new_play_mode: str = "NORMAL", instance_id: int = 0) -> dict:
        """NORMAL, REPEAT_ALL, REPEAT_ONE, SHUFFLE_NOREPEAT, SHUFFLE, SHUFFLE_REPEAT_ONE."""
        return await self._do_action("SetPlayMode", {
            "InstanceID": instance_id,
            "NewPlayMode": new_play_mode,
        })

    async def stop(self, instance_id: int = 0) -> dict:
        return await self._do_action("Stop", {"InstanceID": instance_id})

    async def play(self, speed: int = 1, instance_id: int = 0) -> dict:
        return await self._do_action("Play", {
            "InstanceID": instance_id,
            "Speed": speed,
        })

    async def pause(self, instance_id: int = 0) -> dict:
        return await self._do_action("Pause", {"InstanceID": instance_id})

    async def seek(self, *args, **kwargs) -> dict:
        raise NotImplementedError("Player.seek is not implemented")

    async def next(self, instance_id: int = 0) -> dict:
        return await self._do_action("Next", {"InstanceID": instance_id})

    async def previous(self, instance_id: int = 0) -> dict:
        return await self._do_action("Previous", {"InstanceID": instance_id})

    async def get_current_transport_actions(self, instance_id: int = 0) -> dict:
        return await self._do_action("GetCurrentTransportActions", {"InstanceID": instance_id})

    async def _do_action(self, action: str, data: dict) -> dict:
        return await self._invoke(action, data)
