"""DockGate data models."""

from dockgate.models.enums import TaskStatus, TaskType
from dockgate.models.params import (
    PARAMS_BY_TYPE,
    ConnectNetworkParams,
    ContainerParams,
    CreateContainerParams,
    CreateNetworkParams,
    DisconnectNetworkParams,
    NetworkAttachment,
)
from dockgate.models.task import Task

__all__ = [
    "PARAMS_BY_TYPE",
    "ConnectNetworkParams",
    "ContainerParams",
    "CreateContainerParams",
    "CreateNetworkParams",
    "DisconnectNetworkParams",
    "NetworkAttachment",
    "Task",
    "TaskStatus",
    "TaskType",
]
