"""
Embedded UPnP devices of a Sonos player.

A Sonos player description nests two devices, each with its own services:

  MediaRenderer  — AVTransport, RenderingControl, GroupRenderingControl,
                   ConnectionManager, Queue
  MediaServer    — ContentDirectory, ConnectionManager

The player's own transport/volume commands cover the common renderer calls;
these objects give access to the rest without growing the Player class.
"""

from ..lib.upnp import ActionInvoker
from ..services.base import Service


class AVTransport(Service):
    name = "AVTransport"


class RenderingControl(Service):
    name = "RenderingControl"


class GroupRenderingControl(Service):
    name = "GroupRenderingControl"

    async def get_group_volume(self, instance_id: int = 0) -> dict:
        return await self.action("GetGroupVolume", {"InstanceID": instance_id})

    async def set_group_volume(self, desired_volume: int, instance_id: int = 0) -> dict:
        return await self.action("SetGroupVolume", {
            "InstanceID": instance_id,
            "DesiredVolume": desired_volume,
        })


class ConnectionManager(Service):
    name = "ConnectionManager"

    async def get_protocol_info(self) -> dict:
        return await self.action("GetProtocolInfo")


class Queue(Service):
    name = "Queue"


class ContentDirectory(Service):
    name = "ContentDirectory"

    async def browse(self, object_id: str = "0", browse_flag: str = "BrowseDirectChildren",
                     filter: str = "*", starting_index: int = 0,
                     requested_count: int = 100, sort_criteria: str = "") -> dict:
        return await self.action("Browse", {
            "ObjectID": object_id,
            "BrowseFlag": browse_flag,
            "Filter": filter,
            "StartingIndex": starting_index,
            "RequestedCount": requested_count,
            "SortCriteria": sort_criteria,
        })


class ServerConnectionManager(ConnectionManager):
    name = "ServerConnectionManager"


class MediaRenderer:
    def __init__(self, invoke: ActionInvoker):
        self.av_transport = AVTransport(invoke)
        self.rendering_control = RenderingControl(invoke)
        self.group_rendering_control = GroupRenderingControl(invoke)
        self.connection_manager = ConnectionManager(invoke)
        self.queue = Queue(invoke)


class MediaServer:
    def __init__(self, invoke: ActionInvoker):
        self.content_directory = ContentDirectory(invoke)
        self.connection_manager = ServerConnectionManager(invoke)

    async def browse(self, object_id: str = "0", **kwargs) -> dict:
        """Browse the content directory (``A:`` = music library, ``Q:`` = queue)."""
        return await self.content_directory.browse(object_id, **kwargs)


__all__ = [
    "AVTransport",
    "ConnectionManager",
    "ContentDirectory",
    "GroupRenderingControl",
    "MediaRenderer",
    "MediaServer",
    "Queue",
    "RenderingControl",
    "ServerConnectionManager",
]
