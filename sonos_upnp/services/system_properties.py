from .base import Service


class SystemProperties(Service):
    name = "SystemProperties"

    async def get_string(self, variable_name: str) -> dict:
        return await self.action("GetString", {"VariableName": variable_name})
