"""DockGate enumerations."""

from enum import Enum


class TaskStatus(str, Enum):
    """Task lifecycle status."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def terminal_states(cls) -> set["TaskStatus"]:
        """Return terminal states."""
        return {cls.COMPLETED, cls.FAILED}

    def is_terminal(self) -> bool:
        """Check if status is terminal."""
        return self in self.terminal_states()


class TaskType(str, Enum):
    """Operations the scheduler knows how to dispatch to the engine."""

    CREATE_CONTAINER = "create_container"
    START_CONTAINER = "start_container"
    STOP_CONTAINER = "stop_container"
    RESTART_CONTAINER = "restart_container"
    REMOVE_CONTAINER = "remove_container"
    CREATE_NETWORK = "create_network"
    CONNECT_NETWORK = "connect_network"
    DISCONNECT_NETWORK = "disconnect_network"
