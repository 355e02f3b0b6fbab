"""
ZoneGroupTopology — which players are grouped with which.
"""

from .base import Service


class ZoneGroupTopology(Service):
    name = "ZoneGroupTopology"

    async def get_zone_group_state(self) -> dict:
        """Return the raw ZoneGroupState XML under the ``ZoneGroupState`` key."""
        return await self.action("GetZoneGroupState")

    async def get_zone_group_attributes(self) -> dict:
        return await self.action("GetZoneGroupAttributes")
