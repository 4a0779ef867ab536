"""Log sink feeding live log observers.

Application loggers write through ``BroadcastLogHandler`` into a ``LogSink``;
the broadcast channel subscribes to the sink. The sink owns the hand-off from
whatever thread produced a record onto the event loop, so subscribers are
always called on the loop thread, in emission order.
"""

import asyncio
import logging
import re
import threading
from typing import Callable, Optional

# Loggers whose records never reach observers: the channel's own delivery
# errors would otherwise feed back into the channel.
SUPPRESSED_LOGGERS = ("dockgate.broadcast", "dockgate.failures")


class LogSink:
    """Fan-out point for formatted log lines."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[str], None]] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_thread: Optional[int] = None

    def subscribe(self, callback: Callable[[str], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[str], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Deliver on this loop from now on."""
        self._loop = loop
        self._loop_thread = threading.get_ident()

    def unbind_loop(self) -> None:
        self._loop = None
        self._loop_thread = None

    def emit(self, line: str) -> None:
        loop = self._loop
        if loop is None or threading.get_ident() == self._loop_thread:
            self._deliver(line)
            return
        try:
            loop.call_soon_threadsafe(self._deliver, line)
        except RuntimeError:
            # Loop already closed during shutdown; nobody is listening.
            pass

    def _deliver(self, line: str) -> None:
        for callback in list(self._subscribers):
            callback(line)


class BroadcastLogHandler(logging.Handler):
    """Logging handler that forwards records to a LogSink as ``[LEVEL] message``."""

    def __init__(self, sink: LogSink, level: int = logging.NOTSET):
        super().__init__(level)
        self.sink = sink
        self.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        self.addFilter(_not_suppressed)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.sink.emit(self.format(record))
        except Exception:
            self.handleError(record)


def _not_suppressed(record: logging.LogRecord) -> bool:
    return not record.name.startswith(SUPPRESSED_LOGGERS)


class SensitiveDataFilter(logging.Filter):
    """Mask credentials in log messages."""

    SENSITIVE_PATTERNS = [
        (re.compile(r'token["\']?\s*[:=]\s*["\']?[^"\'}\s]+', re.I), "token=***"),
        (re.compile(r'secret["\']?\s*[:=]\s*["\']?[^"\'}\s]+', re.I), "secret=***"),
        (re.compile(r"bearer\s+[^\s\"']+", re.I), "Bearer ***"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            for pattern, replacement in self.SENSITIVE_PATTERNS:
                record.msg = pattern.sub(replacement, record.msg)
        return True


def configure_logging(level: str = "INFO") -> None:
    """Process-wide console logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("dockgate").setLevel(getattr(logging, level.upper()))
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, SensitiveDataFilter) for f in handler.filters):
            handler.addFilter(SensitiveDataFilter())


def attach_sink(sink: LogSink, logger_name: str = "dockgate") -> BroadcastLogHandler:
    """Route a logger tree into the sink. Returns the handler for later removal."""
    handler = BroadcastLogHandler(sink)
    handler.addFilter(SensitiveDataFilter())
    logging.getLogger(logger_name).addHandler(handler)
    return handler


def detach_sink(handler: BroadcastLogHandler, logger_name: str = "dockgate") -> None:
    logging.getLogger(logger_name).removeHandler(handler)
