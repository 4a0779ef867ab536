"""REST API router."""

import logging
import os
import platform
import sys
from typing import Any, Awaitable, Optional
from uuid import UUID

from docker.errors import DockerException
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse

from dockgate import __version__
from dockgate.api.deps import get_services, verify_api_key
from dockgate.api.schemas import (
    ClearTasksResponse,
    CreateTaskRequest,
    CreateTaskResponse,
    HealthResponse,
    ListTasksResponse,
    TaskResponse,
)
from dockgate.engine import TaskNotFound
from dockgate.integrations import is_not_found
from dockgate.observability.metrics import metrics

logger = logging.getLogger("dockgate.api")

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])
public_router = APIRouter()


# ============================================================================
# Health
# ============================================================================


@public_router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint (no authentication)."""
    services = get_services(request)
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(services.uptime_seconds, 3),
        debug=services.settings.debug,
        observers=services.broadcast.observer_count,
        scheduler=services.scheduler.stats(),
    )


# ============================================================================
# Tasks
# ============================================================================


@router.post("/tasks", response_model=CreateTaskResponse, status_code=202)
async def create_task(body: CreateTaskRequest, request: Request):
    """
    Submit an engine operation.

    The task is accepted whatever its type; an unknown type or bad params
    surface later as a failed task.
    """
    services = get_services(request)
    task = services.registry.create(body.type, body.params)
    services.scheduler.submit(task)

    return CreateTaskResponse(
        task_id=str(task.id),
        status=task.status.value,
        message=f"Task {body.type} submitted",
    )


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: UUID, request: Request):
    """Get a task by ID."""
    services = get_services(request)
    task = services.registry.get(task_id)
    if task is None:
        e = TaskNotFound(str(task_id))
        logger.warning(e.message)
        raise HTTPException(status_code=404, detail=e.message)
    return task.to_dict()


@router.get("/tasks", response_model=ListTasksResponse)
async def list_tasks(request: Request):
    """List all retained tasks."""
    services = get_services(request)
    return ListTasksResponse(tasks=[t.to_dict() for t in services.registry.list()])


@router.delete("/tasks", response_model=ClearTasksResponse)
async def clear_tasks(request: Request):
    """Evict completed tasks past the retention window now."""
    services = get_services(request)
    cleared = services.registry.sweep()
    remaining = len(services.registry)
    logger.info(f"Cleared {cleared} completed tasks")
    return ClearTasksResponse(
        cleared=cleared,
        remaining=remaining,
        message=f"Cleared {cleared} completed tasks",
    )


# ============================================================================
# Containers (read-only, direct engine calls)
# ============================================================================


async def _engine_read(call: Awaitable[Any], kind: str, object_id: Optional[str] = None) -> Any:
    """Await an engine read, mapping engine errors to HTTP errors."""
    try:
        return await call
    except DockerException as e:
        if is_not_found(e):
            logger.warning(f"{kind} not found: {object_id}")
            raise HTTPException(status_code=404, detail=f"{kind} not found")
        target = f" {object_id}" if object_id else ""
        logger.error(f"Engine error reading {kind.lower()}{target}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/containers")
async def list_containers(request: Request, all: bool = Query(False)):
    """List containers."""
    engine = get_services(request).engine
    return await _engine_read(engine.list_containers(all=all), "Containers")


@router.get("/containers/{container_id}")
async def get_container(container_id: str, request: Request):
    """Inspect a container."""
    engine = get_services(request).engine
    return await _engine_read(engine.get_container(container_id), "Container", container_id)


@router.get("/containers/{container_id}/logs", response_class=PlainTextResponse)
async def get_container_logs(
    container_id: str,
    request: Request,
    tail: int = Query(100, ge=0),
):
    """Tail a container's stdout/stderr with timestamps."""
    engine = get_services(request).engine
    logs = await _engine_read(
        engine.get_container_logs(container_id, tail=tail), "Container", container_id
    )
    return PlainTextResponse(logs)


@router.get("/containers/{container_id}/stats")
async def get_container_stats(container_id: str, request: Request):
    """One-shot resource usage snapshot."""
    engine = get_services(request).engine
    return await _engine_read(engine.get_container_stats(container_id), "Container", container_id)


# ============================================================================
# Networks (read-only, direct engine calls)
# ============================================================================


@router.get("/networks")
async def list_networks(request: Request):
    """List networks."""
    engine = get_services(request).engine
    return await _engine_read(engine.list_networks(), "Networks")


@router.get("/networks/{network_id}")
async def get_network(network_id: str, request: Request):
    """Inspect a network."""
    engine = get_services(request).engine
    return await _engine_read(engine.get_network(network_id), "Network", network_id)


# ============================================================================
# Operations
# ============================================================================


@router.get("/metrics")
async def get_metrics():
    """In-process metrics snapshot."""
    return metrics.snapshot()


@router.get("/debug")
async def debug_info(request: Request):
    """Runtime details. Only served when debug mode is on."""
    services = get_services(request)
    if not services.settings.debug:
        raise HTTPException(status_code=404, detail="Not Found")

    logger.debug("Debug endpoint accessed")
    return {
        "version": __version__,
        "python": sys.version,
        "platform": platform.platform(),
        "pid": os.getpid(),
        "uptime_seconds": services.uptime_seconds,
        "routes": [
            {"path": path, "methods": sorted(method.upper() for method in operations)}
            for path, operations in request.app.openapi()["paths"].items()
        ],
        "scheduler": services.scheduler.stats(),
        "tasks": len(services.registry),
        "observers": [
            {"peer": c.peer, "ready": c.ready, "alive": c.alive}
            for c in services.broadcast.observers()
        ],
    }
