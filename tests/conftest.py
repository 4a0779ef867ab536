"""
Pytest fixtures for DockGate tests.
"""

import asyncio
import itertools
import os
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure test config is set before importing dockgate modules.
os.environ.setdefault("DOCKGATE_ENV", "development")
os.environ.setdefault("DOCKGATE_API_TOKEN", "test-token")
os.environ.setdefault("DOCKGATE_LOG_LEVEL", "INFO")

from dockgate.config import Settings
from dockgate.engine import TaskRegistry
from dockgate.main import create_app

pytest_plugins = ("pytest_asyncio",)

TEST_TOKEN = "test-token"
AUTH_HEADERS = {"Authorization": f"Bearer {TEST_TOKEN}"}


class FakeEngine:
    """
    In-memory stand-in for the Docker engine client.

    Every call is recorded in ``calls``. A method can be held open with an
    ``asyncio.Event`` in ``gates`` or made to raise via ``errors``.
    """

    def __init__(self):
        self.calls: list[tuple] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.errors: dict[str, BaseException] = {}
        self.closed = False
        self._ids = itertools.count(1)
        self.containers: dict[str, dict] = {}
        self.networks: dict[str, dict] = {}

    async def _call(self, name: str, *args):
        self.calls.append((name, *args))
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        error = self.errors.get(name)
        if error is not None:
            raise error

    def close(self) -> None:
        self.closed = True

    # Task operations

    async def create_container(self, image, name=None):
        await self._call("create_container", image, name)
        container_id = f"container-{next(self._ids)}"
        self.containers[container_id] = {"Id": container_id, "Image": image, "Name": name}
        return container_id

    async def start_container(self, container_id):
        await self._call("start_container", container_id)

    async def stop_container(self, container_id):
        await self._call("stop_container", container_id)

    async def restart_container(self, container_id):
        await self._call("restart_container", container_id)

    async def remove_container(self, container_id):
        await self._call("remove_container", container_id)

    async def create_network(self, name, driver="bridge", options=None, ipam=None):
        await self._call("create_network", name, driver, options, ipam)
        network_id = f"network-{next(self._ids)}"
        self.networks[network_id] = {"Id": network_id, "Name": name, "Driver": driver}
        return network_id

    async def connect_container_to_network(self, network_id, container_id, endpoint_config=None):
        await self._call("connect_container_to_network", network_id, container_id, endpoint_config)

    async def disconnect_container_from_network(self, network_id, container_id):
        await self._call("disconnect_container_from_network", network_id, container_id)

    # Reads

    async def list_containers(self, all=True):
        await self._call("list_containers", all)
        return list(self.containers.values())

    async def get_container(self, container_id):
        await self._call("get_container", container_id)
        return self.containers[container_id]

    async def get_container_logs(self, container_id, tail=100):
        await self._call("get_container_logs", container_id, tail)
        return "2026-01-01T00:00:00Z hello\n"

    async def get_container_stats(self, container_id):
        await self._call("get_container_stats", container_id)
        return {"cpu_stats": {}, "memory_stats": {"usage": 1024}}

    async def list_networks(self):
        await self._call("list_networks")
        return list(self.networks.values())

    async def get_network(self, network_id):
        await self._call("get_network", network_id)
        return self.networks[network_id]


class FakeClock:
    """Controllable clock for registry timestamps."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


async def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> None:
    """Poll until predicate() is true or fail the test."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            pytest.fail("Condition not met before timeout")
        await asyncio.sleep(interval)


def make_settings(**overrides) -> Settings:
    values = {"env": "development", "api_token": TEST_TOKEN}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return TaskRegistry(clock=clock)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings, fake_engine):
    return create_app(settings, engine=fake_engine)


@pytest.fixture
def services(app):
    return app.state.services


@pytest.fixture
async def client(app):
    """Async test client; lifespan is not run."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await app.state.services.scheduler.shutdown()
