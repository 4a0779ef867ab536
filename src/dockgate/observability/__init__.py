"""Observability helpers for DockGate."""

from dockgate.observability.log_sink import (
    BroadcastLogHandler,
    LogSink,
    SensitiveDataFilter,
    attach_sink,
    configure_logging,
    detach_sink,
)
from dockgate.observability.metrics import metrics

__all__ = [
    "BroadcastLogHandler",
    "LogSink",
    "SensitiveDataFilter",
    "attach_sink",
    "configure_logging",
    "detach_sink",
    "metrics",
]
