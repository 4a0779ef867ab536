"""
Service container for one running DockGate app.

Built once per application and stored on ``app.state.services``. Every
piece of shared state (task registry, scheduler queue, observer set) lives
on an object held here; nothing stateful is module-global.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional

from dockgate.config import HEARTBEAT_INTERVAL_SECONDS, Settings
from dockgate.engine import Scheduler, TaskOperations, TaskRegistry
from dockgate.integrations import EngineClient
from dockgate.observability import LogSink
from dockgate.streaming import LogBroadcastChannel
from dockgate.tasks import TaskSweeper


@dataclass
class Services:
    """Shared service instances."""

    settings: Settings
    engine: EngineClient
    registry: TaskRegistry
    operations: TaskOperations
    scheduler: Scheduler
    sink: LogSink
    broadcast: LogBroadcastChannel
    sweeper: TaskSweeper
    started_at: float = field(default_factory=time.monotonic)

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self.started_at


def build_services(
    settings: Settings,
    engine: Optional[EngineClient] = None,
    registry: Optional[TaskRegistry] = None,
    heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS,
) -> Services:
    """Wire the orchestrator together. ``engine`` and ``registry`` may be injected."""
    if engine is None:
        engine = EngineClient(
            settings.docker_base_url,
            timeout=settings.docker_timeout_seconds,
        )
    if registry is None:
        registry = TaskRegistry()
    operations = TaskOperations(engine)
    scheduler = Scheduler(
        registry,
        operations,
        max_concurrent=settings.max_concurrent_tasks,
    )

    sink = LogSink()
    broadcast = LogBroadcastChannel(
        heartbeat_interval=heartbeat_interval,
        outbox_size=settings.observer_outbox_size,
    )
    sink.subscribe(broadcast.publish)

    return Services(
        settings=settings,
        engine=engine,
        registry=registry,
        operations=operations,
        scheduler=scheduler,
        sink=sink,
        broadcast=broadcast,
        sweeper=TaskSweeper(registry),
    )
