from .base import Service


class QPlay(Service):
    name = "QPlay"

    async def qplay_auth(self, seed: str) -> dict:
        return await self.action("QPlayAuth", {"Seed": seed})
