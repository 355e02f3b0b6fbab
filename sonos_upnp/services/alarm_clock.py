from .base import Service


class AlarmClock(Service):
    name = "AlarmClock"

    async def list_alarms(self) -> dict:
        return await self.action("ListAlarms")

    async def get_time_zone(self) -> dict:
        return await self.action("GetTimeZone")
