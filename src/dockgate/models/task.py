"""Task model - one submitted engine operation and its lifecycle."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from dockgate.models.enums import TaskStatus


class Task(BaseModel):
    """
    Task record.

    Records are frozen: the registry owns the canonical copy and replaces it
    on every transition, so a reference held elsewhere is a snapshot.
    """

    model_config = ConfigDict(frozen=True)

    # Identity
    id: UUID
    type: str
    params: dict[str, Any] = Field(default_factory=dict)

    # Status
    status: TaskStatus = TaskStatus.PENDING

    # Outcome (exactly one is set once terminal)
    result: Optional[Any] = None
    error: Optional[str] = None

    # Timestamps
    created_at: datetime
    updated_at: datetime

    def is_terminal(self) -> bool:
        """Check if task is in a terminal state."""
        return self.status.is_terminal()

    def can_transition_to(self, new_status: TaskStatus) -> bool:
        """Check if transition to new status is valid per state machine."""
        if self.is_terminal():
            return False
        valid_transitions: dict[TaskStatus, set[TaskStatus]] = {
            TaskStatus.PENDING: {TaskStatus.PROCESSING},
            TaskStatus.PROCESSING: {TaskStatus.COMPLETED, TaskStatus.FAILED},
        }
        return new_status in valid_transitions.get(self.status, set())

    def to_dict(self) -> dict[str, Any]:
        """Convert task to a JSON-friendly dictionary."""
        return {
            "id": str(self.id),
            "type": self.type,
            "params": self.params,
            "status": self.status.value,
            "result": self.result,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
