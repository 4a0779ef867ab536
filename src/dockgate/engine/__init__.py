"""DockGate engine - task registry, state machine and scheduler."""

from dockgate.engine.errors import (
    DockGateError,
    InvalidStateTransition,
    InvalidTaskParams,
    TaskNotFound,
    UnauthorizedError,
    UnknownTaskType,
)
from dockgate.engine.operations import TaskOperations
from dockgate.engine.registry import TaskRegistry
from dockgate.engine.scheduler import Scheduler

__all__ = [
    "DockGateError",
    "InvalidStateTransition",
    "InvalidTaskParams",
    "Scheduler",
    "TaskNotFound",
    "TaskOperations",
    "TaskRegistry",
    "UnauthorizedError",
    "UnknownTaskType",
]
