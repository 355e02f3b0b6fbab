"""
sonos-upnp — control Sonos speakers over UPnP.

    from sonos_upnp import Player

    player = Player({"address": "10.0.0.5",
                     "location": "http://10.0.0.5:1400/xml/device_description.xml"})
    player.on("error", lambda e: log.warning("init failed: %s", e))
    await player.init()
    await player.get_volume()
    await player.close()        # also closes the UpnpClient it built
"""

from .lib.errors import ActionError, DescriptionError, UpnpError
from .lib.upnp import ActionInvoker, UpnpClient
from .players import Player, PlayerRegistry

__all__ = [
    "ActionError",
    "ActionInvoker",
    "DescriptionError",
    "Player",
    "PlayerRegistry",
    "UpnpClient",
    "UpnpError",
]
