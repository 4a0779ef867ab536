"""Live log stream endpoint."""

import logging

from fastapi import APIRouter, WebSocket

from dockgate.api.deps import authorize, get_services
from dockgate.engine import UnauthorizedError
from dockgate.streaming import PONG_FRAME, WebSocketTransport

logger = logging.getLogger("dockgate.stream")

stream_router = APIRouter()


@stream_router.websocket("/ws-logs")
async def stream_logs(websocket: WebSocket):
    """
    Stream application log lines to an authenticated observer.

    The token is checked before the handshake completes; a rejected client
    gets close code 1008. Accepted observers receive one text frame per log
    line plus periodic ``__ping__`` frames, which they must answer with
    ``__pong__`` before the next ping or be disconnected.
    """
    services = get_services(websocket)
    transport = WebSocketTransport(websocket)

    if not authorize(websocket):
        logger.warning(f"Rejected log stream connection from {transport.peer}")
        await websocket.close(code=1008, reason=UnauthorizedError().message)
        return

    await websocket.accept()
    logger.info(f"Log observer connected: {transport.peer}")
    connection = services.broadcast.attach(transport)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(
                    f"Log observer disconnected: {transport.peer} "
                    f"(code {message.get('code', 1000)})"
                )
                break
            if message.get("text") == PONG_FRAME:
                connection.mark_alive()
    finally:
        await services.broadcast.detach(connection)
