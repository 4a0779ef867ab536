"""Real-time log streaming to WebSocket observers."""

from dockgate.streaming.channel import (
    PING_FRAME,
    PONG_FRAME,
    LogBroadcastChannel,
    ObserverConnection,
    ObserverTransport,
)
from dockgate.streaming.websocket import WebSocketTransport

__all__ = [
    "PING_FRAME",
    "PONG_FRAME",
    "LogBroadcastChannel",
    "ObserverConnection",
    "ObserverTransport",
    "WebSocketTransport",
]
