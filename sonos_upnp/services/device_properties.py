"""
DeviceProperties — LED, zone name and zone information.
"""

from .base import Service


class DeviceProperties(Service):
    name = "DeviceProperties"

    async def set_led_state(self, state: str | bool = "On") -> dict:
        """Turn the status LED on or off. Accepts "On"/"Off" or a bool."""
        if isinstance(state, bool):
            state = "On" if state else "Off"
        return await self.action("SetLEDState", {"DesiredLEDState": state})

    async def get_led_state(self) -> dict:
        return await self.action("GetLEDState")

    async def get_zone_attributes(self) -> dict:
        return await self.action("GetZoneAttributes")

    async def get_zone_info(self) -> dict:
        return await self.action("GetZoneInfo")
