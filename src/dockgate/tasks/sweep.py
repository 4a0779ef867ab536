"""Completed-task sweep background task."""

import asyncio
import logging
from typing import Optional

from dockgate.config import TASK_SWEEP_INTERVAL_SECONDS
from dockgate.engine import TaskRegistry

logger = logging.getLogger("dockgate.sweep")


class TaskSweeper:
    """
    Periodically evicts expired completed tasks from a registry.

    Runs on a fixed cadence until stopped; a failing pass is logged and the
    loop carries on.
    """

    def __init__(self, registry: TaskRegistry, interval: float = TASK_SWEEP_INTERVAL_SECONDS):
        self.registry = registry
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._shutdown_event: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _loop(self) -> None:
        logger.info(f"Task sweep loop started (interval: {self.interval}s)")

        while not self._shutdown_event.is_set():
            # Wait for next sweep interval or shutdown
            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=self.interval)
                break
            except asyncio.TimeoutError:
                pass

            try:
                evicted = self.registry.sweep()
                if evicted > 0:
                    logger.info(f"Cleared {evicted} expired completed tasks")
            except Exception as e:
                logger.error(f"Task sweep error: {e}", exc_info=True)

        logger.info("Task sweep loop stopped")

    async def start(self) -> None:
        """Start the sweep background task."""
        self._shutdown_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop(), name="dockgate-task-sweep")

    async def stop(self) -> None:
        """Stop the sweep background task."""
        if self._shutdown_event:
            self._shutdown_event.set()

        if self._task:
            try:
                await asyncio.wait_for(self._task, timeout=10.0)
            except asyncio.TimeoutError:
                logger.warning("Task sweep did not stop gracefully, cancelling")
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass

        self._task = None
        self._shutdown_event = None
