"""Engine operations - one coroutine per task type."""

import logging
from typing import Any, Awaitable, Callable, Protocol

from pydantic import BaseModel, ValidationError

from dockgate.engine.errors import InvalidTaskParams, UnknownTaskType
from dockgate.models import (
    PARAMS_BY_TYPE,
    ConnectNetworkParams,
    ContainerParams,
    CreateContainerParams,
    CreateNetworkParams,
    DisconnectNetworkParams,
    Task,
    TaskType,
)
from dockgate.models.params import endpoint_config

logger = logging.getLogger("dockgate.operations")

DEFAULT_IPAM = {"Driver": "default", "Config": []}


class Engine(Protocol):
    """The subset of the engine client that task operations drive."""

    async def create_container(self, image: str, name: str | None = None) -> str: ...
    async def start_container(self, container_id: str) -> None: ...
    async def stop_container(self, container_id: str) -> None: ...
    async def restart_container(self, container_id: str) -> None: ...
    async def remove_container(self, container_id: str) -> None: ...
    async def create_network(
        self,
        name: str,
        driver: str = "bridge",
        options: dict[str, str] | None = None,
        ipam: dict[str, Any] | None = None,
    ) -> str: ...
    async def connect_container_to_network(
        self,
        network_id: str,
        container_id: str,
        endpoint_config: dict[str, Any] | None = None,
    ) -> None: ...
    async def disconnect_container_from_network(self, network_id: str, container_id: str) -> None: ...


def parse_params(task_type: TaskType, params: dict[str, Any]) -> BaseModel:
    """Validate raw params into the variant for task_type."""
    model = PARAMS_BY_TYPE[task_type]
    try:
        return model.model_validate(params)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'params'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidTaskParams(task_type.value, details) from e


class TaskOperations:
    """Maps each task type to the engine calls that carry it out."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._handlers: dict[TaskType, Callable[[Any], Awaitable[dict[str, Any]]]] = {
            TaskType.CREATE_CONTAINER: self.create_container,
            TaskType.START_CONTAINER: self.start_container,
            TaskType.STOP_CONTAINER: self.stop_container,
            TaskType.RESTART_CONTAINER: self.restart_container,
            TaskType.REMOVE_CONTAINER: self.remove_container,
            TaskType.CREATE_NETWORK: self.create_network,
            TaskType.CONNECT_NETWORK: self.connect_network,
            TaskType.DISCONNECT_NETWORK: self.disconnect_network,
        }

    @property
    def supported_types(self) -> set[TaskType]:
        return set(self._handlers)

    async def execute(self, task: Task) -> dict[str, Any]:
        """
        Run a task against the engine and return its result payload.

        Raises:
            UnknownTaskType: task.type is not a known operation.
            InvalidTaskParams: params do not fit the operation.
            docker.errors.DockerException: the engine rejected the call.
        """
        try:
            task_type = TaskType(task.type)
        except ValueError:
            raise UnknownTaskType(task.type) from None

        params = parse_params(task_type, task.params)
        logger.info(f"Executing task: {task.id} ({task_type.value})")
        return await self._handlers[task_type](params)

    async def create_container(self, params: CreateContainerParams) -> dict[str, Any]:
        container_id = await self.engine.create_container(params.image, params.name)

        for network in params.networks:
            await self.engine.connect_container_to_network(
                network.network_id,
                container_id,
                endpoint_config(network.aliases, network.ipv4_address, network.ipv6_address),
            )

        logger.info(f"Container created: {container_id}")
        return {"container_id": container_id}

    async def start_container(self, params: ContainerParams) -> dict[str, Any]:
        await self.engine.start_container(params.container_id)
        return {"message": f"Container {params.container_id} started"}

    async def stop_container(self, params: ContainerParams) -> dict[str, Any]:
        await self.engine.stop_container(params.container_id)
        return {"message": f"Container {params.container_id} stopped"}

    async def restart_container(self, params: ContainerParams) -> dict[str, Any]:
        await self.engine.restart_container(params.container_id)
        return {"message": f"Container {params.container_id} restarted"}

    async def remove_container(self, params: ContainerParams) -> dict[str, Any]:
        await self.engine.remove_container(params.container_id)
        return {"message": f"Container {params.container_id} removed"}

    async def create_network(self, params: CreateNetworkParams) -> dict[str, Any]:
        network_id = await self.engine.create_network(
            params.name,
            driver=params.driver,
            options=params.options,
            ipam=params.ipam or dict(DEFAULT_IPAM, Config=[]),
        )
        logger.info(f"Network created: {network_id} ({params.name})")
        return {"network_id": network_id}

    async def connect_network(self, params: ConnectNetworkParams) -> dict[str, Any]:
        await self.engine.connect_container_to_network(
            params.network_id,
            params.container_id,
            endpoint_config(params.aliases, params.ipv4_address, params.ipv6_address),
        )
        return {
            "message": f"Container {params.container_id} connected to network {params.network_id}"
        }

    async def disconnect_network(self, params: DisconnectNetworkParams) -> dict[str, Any]:
        await self.engine.disconnect_container_from_network(params.network_id, params.container_id)
        return {
            "message": f"Container {params.container_id} disconnected from network {params.network_id}"
        }
