"""Pytest configuration and shared fixtures."""

import asyncio

import pytest

SEED = {
    "address": "10.0.0.5",
    "location": "http://10.0.0.5:1400/xml/device_description.xml",
}


class FakeUpnp:
    """Stands in for UpnpClient: canned description, recorded actions."""

    def __init__(self, description=None, error=None):
        self.description = description if description is not None else {
            "device": {"modelName": "Speaker", "roomName": "Kitchen"},
        }
        self.error = error
        self.gets: list[str] = []
        self.calls: list[tuple] = []
        self.replies: dict[str, dict] = {}
        self.failures: dict[str, Exception] = {}
        self.closed = False

    async def get(self, location):
        self.gets.append(location)
        if self.error is not None:
            raise self.error
        return self.description

    async def post(self, address, action, data, service=None):
        self.calls.append((address, action, dict(data), service))
        if action in self.failures:
            raise self.failures[action]
        return self.replies.get(action, {})

    async def close(self):
        self.closed = True

    @property
    def last_call(self):
        return self.calls[-1]


class GatedUpnp(FakeUpnp):
    """Description fetches block until ``release(n)`` lets the n-th one finish."""

    def __init__(self, description=None, error=None):
        super().__init__(description, error)
        self.gates: list[asyncio.Event] = []

    async def get(self, location):
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return await super().get(location)

    def release(self, index: int):
        self.gates[index].set()


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


@pytest.fixture
def seed() -> dict:
    return dict(SEED)


@pytest.fixture
def make_upnp():
    """Factory: ``make_upnp(description=None, error=None) -> FakeUpnp``."""
    return FakeUpnp


@pytest.fixture
def recorder():
    """Attach to an emitter; returns a list that collects ``(event, args)``."""

    def attach(emitter, *events):
        seen = []
        for name in events:
            emitter.on(name, lambda *args, _name=name: seen.append((_name, args)))
        return seen

    return attach


@pytest.fixture
def settle():
    """Let background tasks (init) run to completion."""

    async def _settle(rounds: int = 5):
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle


@pytest.fixture
def gated_upnp():
    """Factory: ``gated_upnp() -> GatedUpnp``."""
    return GatedUpnp
