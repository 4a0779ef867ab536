"""DockGate HTTP and WebSocket API."""

from dockgate.api.router import public_router, router
from dockgate.api.stream import stream_router

__all__ = ["public_router", "router", "stream_router"]
