"""Exceptions raised by the UPnP transport."""


class UpnpError(Exception):
    """A request to a player failed (network, HTTP status or malformed reply)."""


class DescriptionError(UpnpError):
    """The device description could not be fetched or parsed."""

    def __init__(self, location: str, reason):
        super().__init__(f"Cannot read description at {location}: {reason}")
        self.location = location
        self.reason = reason


class ActionError(UpnpError):
    """The player answered an action with a SOAP fault."""

    def __init__(self, action: str, code: int | None = None, description: str = ""):
        detail = f"UPnP error {code}" if code is not None else "SOAP fault"
        if description:
            detail += f" ({description})"
        super().__init__(f"{action} failed: {detail}")
        self.action = action
        self.code = code
        self.description = description
