"""FIFO task scheduler with a concurrency ceiling."""

import asyncio
import logging
from collections import deque
from time import perf_counter
from typing import Any, Optional

from dockgate.engine.operations import TaskOperations
from dockgate.engine.registry import TaskRegistry
from dockgate.models import Task
from dockgate.observability.metrics import metrics

logger = logging.getLogger("dockgate.scheduler")

# Engine failures go to their own channel, separate from the operational log.
failure_logger = logging.getLogger("dockgate.failures")


class Scheduler:
    """
    Dispatches queued tasks to the engine, at most ``max_concurrent`` at a time.

    Tasks leave the queue strictly in submission order. Each dispatched task
    runs as its own asyncio task; the drain loop never waits on one, only on
    free slots. When a dispatch finishes, successfully or not, its slot is
    released and the queue is drained again.

    Every queued task is attempted exactly once. There is no retry, no
    priority and no per-task timeout: an engine call that never returns
    holds its slot until shutdown.
    """

    def __init__(
        self,
        registry: TaskRegistry,
        operations: TaskOperations,
        max_concurrent: int = 5,
    ):
        self.registry = registry
        self.operations = operations
        self.max_concurrent = max_concurrent
        self._queue: deque[Task] = deque()
        self._active = 0
        self._draining = False
        self._inflight: set[asyncio.Task] = set()

    @property
    def active(self) -> int:
        return self._active

    @property
    def queued(self) -> int:
        return len(self._queue)

    def submit(self, task: Task) -> None:
        """Queue a task and start dispatching if a slot is free. Never blocks."""
        self._queue.append(task)
        logger.info(f"Task added to queue: {task.id} ({task.type})")
        self._drain()

    def _drain(self) -> None:
        # Only one drain pass runs at a time; a nested call is absorbed by the
        # outer loop, which re-checks the queue before exiting.
        if self._draining:
            return

        self._draining = True
        try:
            while self._active < self.max_concurrent and self._queue:
                task = self._queue.popleft()
                self._active += 1
                self.registry.start(task.id)

                inflight = asyncio.create_task(
                    self._run(task),
                    name=f"dockgate-task-{task.id}",
                )
                self._inflight.add(inflight)
                inflight.add_done_callback(self._inflight.discard)
        finally:
            self._draining = False
            self._update_gauges()

    async def _run(self, task: Task) -> None:
        started = perf_counter()
        try:
            result = await self.operations.execute(task)
        except Exception as e:
            self.registry.fail(task.id, e)
            failure_logger.error(
                f"Task failed: {task.id} ({task.type}): {e}",
                exc_info=e,
            )
        else:
            self.registry.complete(task.id, result)
        finally:
            metrics.observe("task.duration_ms", (perf_counter() - started) * 1000.0)
            self._active -= 1
            self._drain()

    def _update_gauges(self) -> None:
        metrics.set_gauge("scheduler.active", self._active)
        metrics.set_gauge("scheduler.queued", len(self._queue))

    def stats(self) -> dict[str, Any]:
        """Current load."""
        return {
            "active": self._active,
            "queued": len(self._queue),
            "max_concurrent": self.max_concurrent,
        }

    async def wait_idle(self, timeout: Optional[float] = None) -> None:
        """Wait until no dispatch is in flight."""

        async def _idle() -> None:
            # A finishing dispatch spawns its successor before it completes,
            # so the in-flight set only empties once the queue is drained.
            while self._inflight:
                await asyncio.wait(set(self._inflight))

        await asyncio.wait_for(_idle(), timeout=timeout)

    async def shutdown(self) -> None:
        """Cancel in-flight dispatches. Only for process shutdown."""
        pending = list(self._inflight)
        if self._queue:
            logger.warning(f"Dropping {len(self._queue)} queued tasks on shutdown")
            self._queue.clear()
        for inflight in pending:
            inflight.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info(f"Cancelled {len(pending)} in-flight tasks")
