"""API request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Tasks
# ============================================================================


class CreateTaskRequest(BaseModel):
    """Create task request."""

    type: str = Field(..., min_length=1, description="Operation type, e.g. start_container")
    params: dict[str, Any] = Field(default_factory=dict, description="Operation parameters")


class CreateTaskResponse(BaseModel):
    """Create task response."""

    task_id: str
    status: str
    message: str


class TaskResponse(BaseModel):
    """Task response."""

    id: str
    type: str
    params: dict[str, Any]
    status: str
    result: Optional[Any] = None
    error: Optional[str] = None
    created_at: str
    updated_at: str


class ListTasksResponse(BaseModel):
    """List tasks response."""

    tasks: list[TaskResponse]


class ClearTasksResponse(BaseModel):
    """Result of an on-demand sweep."""

    cleared: int
    remaining: int
    message: str


# ============================================================================
# Service
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    uptime_seconds: float
    debug: bool
    observers: int
    scheduler: dict[str, int]
