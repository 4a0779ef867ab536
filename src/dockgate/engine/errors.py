"""DockGate engine errors."""


class DockGateError(Exception):
    """Base error for DockGate operations."""

    def __init__(self, message: str, code: str = "DOCKGATE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class TaskNotFound(DockGateError):
    """Task does not exist."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}", "TASK_NOT_FOUND")
        self.task_id = task_id


class UnknownTaskType(DockGateError):
    """Task type has no registered operation."""

    def __init__(self, task_type: str):
        super().__init__(f"Unknown task type: {task_type}", "UNKNOWN_TASK_TYPE")
        self.task_type = task_type


class InvalidTaskParams(DockGateError):
    """Task params do not match the shape its type requires."""

    def __init__(self, task_type: str, detail: str):
        super().__init__(
            f"Invalid params for {task_type}: {detail}",
            "INVALID_TASK_PARAMS",
        )
        self.task_type = task_type
        self.detail = detail


class InvalidStateTransition(DockGateError):
    """Invalid task state transition."""

    def __init__(self, current_status: str, requested_status: str):
        super().__init__(
            f"Invalid transition from {current_status} to {requested_status}",
            "INVALID_STATE_TRANSITION",
        )
        self.current_status = current_status
        self.requested_status = requested_status


class UnauthorizedError(DockGateError):
    """Operation not authorized."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "UNAUTHORIZED")
