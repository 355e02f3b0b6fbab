"""
UPnP transport for Sonos players, built on async_upnp_client.

Two calls:
  get(location)                             — load a device description
  post(address, action, data, service=None) — invoke an action on the speaker

``get`` returns the description as a plain attribute bag (``{"device": {...}}``)
and keeps the parsed UpnpDevice so later actions resolve control URLs and
argument types from the speaker's own SCPDs.  ``post`` loads the description
on first use when ``get`` was never called for that address.

Usage:
    client = UpnpClient()
    desc = await client.get("http://10.0.0.5:1400/xml/device_description.xml")
    vol = await client.post("10.0.0.5", "GetVolume",
                            {"InstanceID": 0, "Channel": "Master"})
    await client.close()
"""

import asyncio
import logging
from urllib.parse import urlparse

import aiohttp
from async_upnp_client.aiohttp import AiohttpSessionRequester
from async_upnp_client.client import UpnpDevice, UpnpService
from async_upnp_client.client_factory import UpnpFactory
from async_upnp_client.exceptions import UpnpActionError
from async_upnp_client.exceptions import UpnpError as LibUpnpError

from .config import cfg
from .errors import ActionError, DescriptionError, UpnpError

logger = logging.getLogger(__name__)

UPNP_PORT = cfg("upnp", "port", default=1400)
REQUEST_TIMEOUT = cfg("upnp", "timeout", default=5)
DESCRIPTION_PATH = "/xml/device_description.xml"

# name -> (embedded device kind or None for any device, service type)
SERVICES = {
    "AVTransport": ("MediaRenderer", "urn:schemas-upnp-org:service:AVTransport:1"),
    "RenderingControl": ("MediaRenderer", "urn:schemas-upnp-org:service:RenderingControl:1"),
    "GroupRenderingControl": ("MediaRenderer",
                              "urn:schemas-upnp-org:service:GroupRenderingControl:1"),
    "ConnectionManager": ("MediaRenderer", "urn:schemas-upnp-org:service:ConnectionManager:1"),
    "Queue": ("MediaRenderer", "urn:schemas-sonos-com:service:Queue:1"),
    "ContentDirectory": ("MediaServer", "urn:schemas-upnp-org:service:ContentDirectory:1"),
    "ServerConnectionManager": ("MediaServer",
                                "urn:schemas-upnp-org:service:ConnectionManager:1"),
    "DeviceProperties": (None, "urn:schemas-upnp-org:service:DeviceProperties:1"),
    "ZoneGroupTopology": (None, "urn:schemas-upnp-org:service:ZoneGroupTopology:1"),
    "GroupManagement": (None, "urn:schemas-upnp-org:service:GroupManagement:1"),
    "AlarmClock": (None, "urn:schemas-upnp-org:service:AlarmClock:1"),
    "MusicServices": (None, "urn:schemas-upnp-org:service:MusicServices:1"),
    "SystemProperties": (None, "urn:schemas-upnp-org:service:SystemProperties:1"),
    "QPlay": (None, "urn:schemas-tencent-com:service:QPlay:1"),
}

# Player-level actions that do not live on AVTransport
ACTION_SERVICES = {
    "GetVolume": "RenderingControl",
    "SetVolume": "RenderingControl",
    "GetMute": "RenderingControl",
    "SetMute": "RenderingControl",
}


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def device_attributes(device: UpnpDevice) -> dict:
    """Flatten the ``<device>`` element's leaf fields into a dict.

    Vendor fields (``roomName``, ``softwareVersion``, ...) come through under
    their local tag names.  A tag that appears more than once collects its
    values into a list in document order.  Nested containers (``iconList``,
    ``serviceList``, ``deviceList``) are left to the UpnpDevice itself.
    """
    attributes: dict = {}
    for child in device.device_info.xml:
        if len(child):
            continue
        name = _local(child.tag)
        value = (child.text or "").strip()
        if name not in attributes:
            attributes[name] = value
        elif isinstance(attributes[name], list):
            attributes[name].append(value)
        else:
            attributes[name] = [attributes[name], value]

    attributes.setdefault("deviceType", device.device_type)
    attributes.setdefault("friendlyName", device.friendly_name)
    attributes.setdefault("manufacturer", device.manufacturer)
    attributes.setdefault("modelName", device.model_name)
    attributes.setdefault("UDN", device.udn)
    return attributes


def find_service(device: UpnpDevice, name: str) -> UpnpService | None:
    """Resolve a service name to the UpnpService on *device* (or an embedded one)."""
    kind, service_type = SERVICES[name]
    for candidate in device.all_devices:
        if kind is not None and f":{kind}:" not in (candidate.device_type or ""):
            continue
        service = candidate.services.get(service_type)
        if service is not None:
            return service
    return None


def _wire_text(value) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


class UpnpClient:
    """Loads descriptions and invokes actions over one aiohttp session."""

    def __init__(self, session: aiohttp.ClientSession | None = None,
                 port: int = UPNP_PORT, timeout: float = REQUEST_TIMEOUT):
        self._session = session
        self._owns_session = session is None
        self.port = port
        self.timeout = timeout
        self._factory: UpnpFactory | None = None
        self._devices: dict[str, UpnpDevice] = {}

    def _get_factory(self) -> UpnpFactory:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": "sonos-upnp/1.0"})
            self._owns_session = True
            self._factory = None
        if self._factory is None:
            requester = AiohttpSessionRequester(self._session, timeout=self.timeout)
            self._factory = UpnpFactory(requester, non_strict=True)
        return self._factory

    async def close(self):
        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None
        self._factory = None
        self._devices.clear()

    def base_url(self, address: str) -> str:
        """Accepts a bare host, ``host:port`` or a full ``http://`` URL."""
        if address.startswith(("http://", "https://")):
            return address.rstrip("/")
        if ":" in address:
            return f"http://{address}"
        return f"http://{address}:{self.port}"

    def _key(self, url: str) -> str:
        return urlparse(self.base_url(url)).netloc

    def device(self, address: str) -> UpnpDevice | None:
        """The UpnpDevice loaded for *address*, if any."""
        return self._devices.get(self._key(address))

    async def _load(self, location: str) -> UpnpDevice:
        logger.debug("GET %s", location)
        try:
            device = await self._get_factory().async_create_device(location)
        except (LibUpnpError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DescriptionError(location, e) from e
        self._devices[self._key(location)] = device
        return device

    async def get(self, location: str) -> dict:
        """Load the description at *location*; result has a ``device`` key."""
        device = await self._load(location)
        return {"device": device_attributes(device)}

    async def post(self, address: str, action: str, data: dict,
                   service: str | None = None) -> dict:
        """Invoke *action* with *data* on *address* and return the reply arguments."""
        name = service or ACTION_SERVICES.get(action, "AVTransport")
        if name not in SERVICES:
            raise UpnpError(f"{action}: unknown service {name!r}")

        device = self.device(address)
        if device is None:
            device = await self._load(f"{self.base_url(address)}{DESCRIPTION_PATH}")

        upnp_service = find_service(device, name)
        if upnp_service is None:
            raise UpnpError(f"{action}: {address} has no {name} service")
        if not upnp_service.has_action(action):
            raise UpnpError(f"{action}: not an action of {name}")
        upnp_action = upnp_service.action(action)

        # Coerce through the SCPD's declared types so callers can pass plain values
        arguments = {}
        for arg_name, value in data.items():
            argument = upnp_action.argument(arg_name, "in")
            if argument is None:
                raise UpnpError(f"{action}: unexpected argument {arg_name!r}")
            arguments[arg_name] = argument.related_state_variable.coerce_python(
                _wire_text(value))

        logger.debug("POST %s %s.%s %s", address, name, action, arguments)
        try:
            result = await upnp_action.async_call(**arguments)
        except UpnpActionError as e:
            raise ActionError(action, getattr(e, "error_code", None),
                              getattr(e, "error_desc", None) or str(e)) from e
        except LibUpnpError as e:
            raise UpnpError(f"{action}: {address}: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpnpError(f"{action}: {address} unreachable: {e}") from e
        return dict(result)


class ActionInvoker:
    """An address bound to a client: the capability sub-services are given."""

    def __init__(self, client, address: str):
        self._client = client
        self._address = address

    @property
    def address(self) -> str:
        return self._address

    async def __call__(self, action: str, data: dict | None = None,
                       service: str | None = None) -> dict:
        return await self._client.post(self._address, action, data or {}, service=service)
