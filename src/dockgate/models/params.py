"""Typed parameter payloads, one variant per task type.

Submitted params are stored verbatim on the task; they are validated into
the matching variant only when the scheduler dispatches the task. Field
aliases accept the camelCase names used by existing API clients.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from dockgate.models.enums import TaskType


class _Params(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class NetworkAttachment(_Params):
    """Network to join right after a container is created."""

    network_id: str = Field(..., alias="networkId", min_length=1)
    aliases: list[str] = Field(default_factory=list)
    ipv4_address: Optional[str] = Field(None, alias="ipv4Address")
    ipv6_address: Optional[str] = Field(None, alias="ipv6Address")


class CreateContainerParams(_Params):
    image: str = Field(..., min_length=1)
    name: Optional[str] = None
    networks: list[NetworkAttachment] = Field(default_factory=list)


class ContainerParams(_Params):
    """Params for start/stop/restart/remove."""

    container_id: str = Field(..., alias="containerId", min_length=1)


class CreateNetworkParams(_Params):
    name: str = Field(..., min_length=1)
    driver: str = "bridge"
    options: dict[str, str] = Field(default_factory=dict)
    ipam: Optional[dict[str, Any]] = None


class ConnectNetworkParams(_Params):
    network_id: str = Field(..., alias="networkId", min_length=1)
    container_id: str = Field(..., alias="containerId", min_length=1)
    aliases: list[str] = Field(default_factory=list)
    ipv4_address: Optional[str] = Field(None, alias="ipv4Address")
    ipv6_address: Optional[str] = Field(None, alias="ipv6Address")


class DisconnectNetworkParams(_Params):
    network_id: str = Field(..., alias="networkId", min_length=1)
    container_id: str = Field(..., alias="containerId", min_length=1)


PARAMS_BY_TYPE: dict[TaskType, type[_Params]] = {
    TaskType.CREATE_CONTAINER: CreateContainerParams,
    TaskType.START_CONTAINER: ContainerParams,
    TaskType.STOP_CONTAINER: ContainerParams,
    TaskType.RESTART_CONTAINER: ContainerParams,
    TaskType.REMOVE_CONTAINER: ContainerParams,
    TaskType.CREATE_NETWORK: CreateNetworkParams,
    TaskType.CONNECT_NETWORK: ConnectNetworkParams,
    TaskType.DISCONNECT_NETWORK: DisconnectNetworkParams,
}


def endpoint_config(
    aliases: list[str],
    ipv4_address: Optional[str],
    ipv6_address: Optional[str],
) -> dict[str, Any]:
    """Build an engine endpoint config from attachment fields."""
    return {
        "Aliases": list(aliases),
        "IPAMConfig": {
            "IPv4Address": ipv4_address,
            "IPv6Address": ipv6_address,
        },
    }
