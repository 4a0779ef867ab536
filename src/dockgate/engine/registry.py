"""In-memory task registry and task state machine."""

import copy
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional
from uuid import UUID, uuid4

from dockgate.config import TASK_RETENTION_SECONDS
from dockgate.engine.errors import InvalidStateTransition, TaskNotFound
from dockgate.models import Task, TaskStatus
from dockgate.observability.metrics import metrics

logger = logging.getLogger("dockgate.registry")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskRegistry:
    """
    Keyed store of task records.

    The registry is the only writer of task state. Every mutation goes
    through create/start/complete/fail/sweep; records handed out are frozen
    snapshots. Transitions follow pending -> processing -> completed|failed.
    A refused transition (unknown id, terminal record, skipped step) is
    logged and reported as False, never raised.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        retention: timedelta = timedelta(seconds=TASK_RETENTION_SECONDS),
    ):
        self._clock = clock
        self.retention = retention
        self._tasks: dict[UUID, Task] = {}

    def create(self, type: str, params: Optional[dict[str, Any]] = None) -> Task:
        """Create and store a pending task."""
        now = self._clock()
        task = Task(
            id=uuid4(),
            type=type,
            params=copy.deepcopy(params or {}),
            status=TaskStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        self._tasks[task.id] = task
        metrics.inc_counter("tasks.submitted")
        logger.info(f"Task created: {task.id} ({type})")
        return task

    def transition(
        self,
        task_id: UUID,
        new_status: TaskStatus,
        result: Any = None,
        error: Optional[str] = None,
    ) -> Task:
        """
        Apply a state transition.

        Raises:
            TaskNotFound: No record with this id.
            InvalidStateTransition: The state machine forbids the move.
        """
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFound(str(task_id))
        if not task.can_transition_to(new_status):
            raise InvalidStateTransition(task.status.value, new_status.value)

        updated = task.model_copy(
            update={
                "status": new_status,
                "result": result if new_status == TaskStatus.COMPLETED else None,
                "error": error if new_status == TaskStatus.FAILED else None,
                "updated_at": self._clock(),
            }
        )
        self._tasks[task_id] = updated
        return updated

    def _try_transition(self, task_id: UUID, new_status: TaskStatus, **outcome: Any) -> bool:
        try:
            self.transition(task_id, new_status, **outcome)
        except TaskNotFound:
            logger.warning(f"Task not found for {new_status.value}: {task_id}")
            return False
        except InvalidStateTransition as e:
            logger.warning(f"Task {task_id}: {e.message}")
            return False
        return True

    def start(self, task_id: UUID) -> bool:
        """Mark a task as processing."""
        if not self._try_transition(task_id, TaskStatus.PROCESSING):
            return False
        logger.info(f"Task started: {task_id}")
        return True

    def complete(self, task_id: UUID, result: Any) -> bool:
        """Mark a task as completed with its result payload.

        A completed task always carries a result; ``None`` is stored as ``{}``.
        """
        if result is None:
            result = {}
        if not self._try_transition(task_id, TaskStatus.COMPLETED, result=result):
            return False
        metrics.inc_counter("tasks.completed")
        logger.info(f"Task completed: {task_id}")
        return True

    def fail(self, task_id: UUID, error: BaseException | str) -> bool:
        """Mark a task as failed with a human-readable error."""
        if isinstance(error, BaseException):
            message = str(error) or type(error).__name__
        else:
            message = error or "Unknown error"
        if not self._try_transition(task_id, TaskStatus.FAILED, error=message):
            return False
        metrics.inc_counter("tasks.failed")
        logger.error(f"Task failed: {task_id} - {message}")
        return True

    def get(self, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task is not None else None

    def list(self) -> list[Task]:
        """Snapshot of all retained tasks."""
        return [task.model_copy(deep=True) for task in self._tasks.values()]

    def __len__(self) -> int:
        return len(self._tasks)

    def sweep(self) -> int:
        """
        Evict completed tasks older than the retention window.

        Failed tasks are kept until restart so operators can inspect them.

        Returns:
            Number of tasks evicted.
        """
        cutoff = self._clock() - self.retention
        expired = [
            task_id
            for task_id, task in self._tasks.items()
            if task.status == TaskStatus.COMPLETED and task.updated_at < cutoff
        ]
        for task_id in expired:
            del self._tasks[task_id]
            logger.debug(f"Cleared completed task: {task_id}")

        if expired:
            metrics.inc_counter("tasks.evicted", len(expired))
        return len(expired)
