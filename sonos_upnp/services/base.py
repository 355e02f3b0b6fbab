# sonos-upnp
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Base class for player sub-services.

A sub-service groups the actions of one UPnP service (DeviceProperties,
ZoneGroupTopology, ...).  It only marshals parameters; the actual call goes
through the ActionInvoker it was built with, so a sub-service can reach the
player's address but never the player itself.
"""

from ..lib.upnp import ActionInvoker


class Service:
    """One UPnP service on a player."""

    # -- Subclass must set this (key into lib.upnp.SERVICES) --
    name: str = ""

    def __init__(self, invoke: ActionInvoker):
        self._invoke = invoke

    async def action(self, action: str, data: dict | None = None) -> dict:
        """Invoke *action* on this service."""
        return await self._invoke(action, data, service=self.name)

    def __repr__(self):
        return f"<{type(self).__name__} {self._invoke.address}>"
