"""Log broadcast channel.

Fans every published log line out to the attached observers. Delivery favors
availability: publishing never waits on an observer, and a line an observer
cannot take is dropped for that observer only.

Each observer has a bounded outbox drained by a single writer task, which
keeps per-observer delivery in publish order. Each observer also has a
heartbeat supervisor: if no pong arrived since the previous ping, the
observer is terminated and detached.
"""

import asyncio
import logging
from typing import Optional, Protocol

from dockgate.config import HEARTBEAT_INTERVAL_SECONDS
from dockgate.observability.metrics import metrics

# Delivery diagnostics; this logger is never broadcast.
logger = logging.getLogger("dockgate.broadcast")
# Observer lifecycle events; broadcast like any application log.
stream_logger = logging.getLogger("dockgate.stream")

PING_FRAME = "__ping__"
PONG_FRAME = "__pong__"

DEFAULT_OUTBOX_SIZE = 1000


class ObserverTransport(Protocol):
    """Line-oriented sink with a liveness probe."""

    peer: str

    @property
    def ready(self) -> bool: ...

    async def send_text(self, data: str) -> None: ...

    async def ping(self) -> None: ...

    async def terminate(self, code: int, reason: str) -> None: ...


class ObserverConnection:
    """One attached observer: transport, outbox and liveness flag."""

    def __init__(self, transport: ObserverTransport, outbox_size: int = DEFAULT_OUTBOX_SIZE):
        self.transport = transport
        self.alive = True
        self.outbox: asyncio.Queue[str] = asyncio.Queue(maxsize=outbox_size)
        self.writer: Optional[asyncio.Task] = None
        self.heartbeat: Optional[asyncio.Task] = None

    @property
    def peer(self) -> str:
        return self.transport.peer

    @property
    def ready(self) -> bool:
        return self.transport.ready

    def mark_alive(self) -> None:
        """Record a pong."""
        self.alive = True

    def offer(self, line: str) -> None:
        """Queue a line without waiting. Raises asyncio.QueueFull when saturated."""
        self.outbox.put_nowait(line)


class LogBroadcastChannel:
    """Set of live observers plus their writer and heartbeat tasks."""

    def __init__(
        self,
        heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS,
        outbox_size: int = DEFAULT_OUTBOX_SIZE,
    ):
        self.heartbeat_interval = heartbeat_interval
        self.outbox_size = outbox_size
        self._observers: set[ObserverConnection] = set()

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def observers(self) -> list[ObserverConnection]:
        return list(self._observers)

    def publish(self, line: str) -> None:
        """Offer a line to every ready observer. Never raises, never blocks."""
        for connection in list(self._observers):
            if not connection.ready:
                continue
            try:
                connection.offer(line)
            except asyncio.QueueFull:
                metrics.inc_counter("broadcast.dropped")
                logger.debug(f"Outbox full for {connection.peer}, dropping line")
            except Exception as e:
                metrics.inc_counter("broadcast.dropped")
                logger.warning(f"Log delivery to {connection.peer} failed: {e}")

    def attach(self, transport: ObserverTransport) -> ObserverConnection:
        """Add an authenticated observer and start supervising it."""
        connection = ObserverConnection(transport, self.outbox_size)
        connection.writer = asyncio.create_task(
            self._write_loop(connection), name=f"log-writer-{transport.peer}"
        )
        connection.heartbeat = asyncio.create_task(
            self._heartbeat_loop(connection), name=f"log-heartbeat-{transport.peer}"
        )
        self._observers.add(connection)
        metrics.set_gauge("broadcast.observers", len(self._observers))
        return connection

    async def detach(self, connection: ObserverConnection) -> None:
        """Remove an observer and stop its tasks. Safe to call more than once."""
        if connection not in self._observers:
            return
        self._observers.discard(connection)
        metrics.set_gauge("broadcast.observers", len(self._observers))

        current = asyncio.current_task()
        tasks = [
            t for t in (connection.writer, connection.heartbeat)
            if t is not None and t is not current and not t.done()
        ]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def terminate(self, connection: ObserverConnection, code: int, reason: str) -> None:
        """Close an observer's transport and detach it."""
        try:
            await connection.transport.terminate(code, reason)
        except Exception as e:
            logger.debug(f"Error closing observer {connection.peer}: {e}")
        await self.detach(connection)

    async def close(self, code: int = 1001, reason: str = "Server shutting down") -> None:
        """Terminate every observer."""
        for connection in list(self._observers):
            await self.terminate(connection, code, reason)

    async def _write_loop(self, connection: ObserverConnection) -> None:
        while True:
            line = await connection.outbox.get()
            try:
                await connection.transport.send_text(line)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                metrics.inc_counter("broadcast.dropped")
                logger.warning(f"Log delivery to {connection.peer} failed: {e}")

    async def _heartbeat_loop(self, connection: ObserverConnection) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval)

            if not connection.alive:
                stream_logger.warning(
                    f"Terminating unresponsive log observer {connection.peer}"
                )
                await self.terminate(connection, 1008, "Heartbeat timeout")
                return

            connection.alive = False
            try:
                await connection.transport.ping()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.debug(f"Ping to {connection.peer} failed: {e}")
