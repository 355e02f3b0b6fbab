from .base import Service


class MusicServices(Service):
    name = "MusicServices"

    async def list_available_services(self) -> dict:
        return await self.action("ListAvailableServices")
