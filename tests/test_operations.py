"""
Engine operation dispatch tests.
"""

import pytest

from conftest import FakeEngine
from dockgate.engine import InvalidTaskParams, TaskOperations, UnknownTaskType
from dockgate.models import TaskType


@pytest.fixture
def operations(fake_engine):
    return TaskOperations(fake_engine)


def test_every_task_type_has_an_operation(operations):
    assert operations.supported_types == set(TaskType)


@pytest.mark.asyncio
async def test_create_container_returns_id(operations, registry, fake_engine):
    task = registry.create("create_container", {"image": "nginx:alpine", "name": "web"})

    result = await operations.execute(task)

    assert result == {"container_id": "container-1"}
    assert fake_engine.calls == [("create_container", "nginx:alpine", "web")]


@pytest.mark.asyncio
async def test_create_container_joins_requested_networks(operations, registry, fake_engine):
    """Networks listed at creation are connected in order after the container exists."""
    task = registry.create(
        "create_container",
        {
            "image": "nginx",
            "networks": [
                {"networkId": "net-a", "aliases": ["web"], "ipv4Address": "10.0.0.5"},
                {"networkId": "net-b"},
            ],
        },
    )

    result = await operations.execute(task)

    container_id = result["container_id"]
    assert fake_engine.calls[1:] == [
        (
            "connect_container_to_network",
            "net-a",
            container_id,
            {"Aliases": ["web"], "IPAMConfig": {"IPv4Address": "10.0.0.5", "IPv6Address": None}},
        ),
        (
            "connect_container_to_network",
            "net-b",
            container_id,
            {"Aliases": [], "IPAMConfig": {"IPv4Address": None, "IPv6Address": None}},
        ),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "task_type,verb",
    [
        ("start_container", "started"),
        ("stop_container", "stopped"),
        ("restart_container", "restarted"),
        ("remove_container", "removed"),
    ],
)
async def test_container_lifecycle_operations(operations, registry, fake_engine, task_type, verb):
    task = registry.create(task_type, {"containerId": "abc"})

    result = await operations.execute(task)

    assert result == {"message": f"Container abc {verb}"}
    assert fake_engine.calls == [(task_type, "abc")]


@pytest.mark.asyncio
async def test_params_accept_snake_case_names(operations, registry, fake_engine):
    task = registry.create("start_container", {"container_id": "abc"})

    await operations.execute(task)

    assert fake_engine.calls == [("start_container", "abc")]


@pytest.mark.asyncio
async def test_create_network_defaults(operations, registry, fake_engine):
    """Driver defaults to bridge and IPAM to the engine default."""
    task = registry.create("create_network", {"name": "backend"})

    result = await operations.execute(task)

    assert result == {"network_id": "network-1"}
    assert fake_engine.calls == [
        ("create_network", "backend", "bridge", {}, {"Driver": "default", "Config": []}),
    ]


@pytest.mark.asyncio
async def test_create_network_passes_options(operations, registry, fake_engine):
    ipam = {"Driver": "default", "Config": [{"Subnet": "172.28.0.0/16"}]}
    task = registry.create(
        "create_network",
        {"name": "backend", "driver": "overlay", "options": {"encrypted": "true"}, "ipam": ipam},
    )

    await operations.execute(task)

    assert fake_engine.calls == [
        ("create_network", "backend", "overlay", {"encrypted": "true"}, ipam),
    ]


@pytest.mark.asyncio
async def test_connect_and_disconnect_network(operations, registry, fake_engine):
    connect = registry.create(
        "connect_network",
        {"networkId": "net-a", "containerId": "abc", "aliases": ["db"]},
    )
    disconnect = registry.create("disconnect_network", {"networkId": "net-a", "containerId": "abc"})

    connected = await operations.execute(connect)
    disconnected = await operations.execute(disconnect)

    assert connected == {"message": "Container abc connected to network net-a"}
    assert disconnected == {"message": "Container abc disconnected from network net-a"}
    assert fake_engine.calls == [
        (
            "connect_container_to_network",
            "net-a",
            "abc",
            {"Aliases": ["db"], "IPAMConfig": {"IPv4Address": None, "IPv6Address": None}},
        ),
        ("disconnect_container_from_network", "net-a", "abc"),
    ]


@pytest.mark.asyncio
async def test_unknown_type_raises_without_engine_call(operations, registry, fake_engine):
    task = registry.create("bogus_op", {})

    with pytest.raises(UnknownTaskType) as exc_info:
        await operations.execute(task)

    assert str(exc_info.value) == "Unknown task type: bogus_op"
    assert exc_info.value.code == "UNKNOWN_TASK_TYPE"
    assert fake_engine.calls == []


@pytest.mark.asyncio
async def test_missing_params_raise_invalid_params(operations, registry, fake_engine):
    task = registry.create("start_container", {})

    with pytest.raises(InvalidTaskParams) as exc_info:
        await operations.execute(task)

    assert exc_info.value.task_type == "start_container"
    assert "containerId" in exc_info.value.detail
    assert fake_engine.calls == []


@pytest.mark.asyncio
async def test_engine_errors_propagate(registry):
    engine = FakeEngine()
    engine.errors["stop_container"] = RuntimeError("No such container: abc")
    operations = TaskOperations(engine)

    with pytest.raises(RuntimeError, match="No such container"):
        await operations.execute(registry.create("stop_container", {"containerId": "abc"}))
