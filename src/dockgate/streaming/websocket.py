"""WebSocket transport for log observers."""

from starlette.websockets import WebSocket, WebSocketState

from dockgate.streaming.channel import PING_FRAME


class WebSocketTransport:
    """Adapts an accepted Starlette WebSocket to the observer transport protocol.

    ASGI exposes no protocol-level ping, so liveness uses text frames: the
    server sends ``__ping__`` and the client answers ``__pong__``.
    """

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        client = websocket.client
        self.peer = f"{client.host}:{client.port}" if client else "unknown"

    @property
    def ready(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_text(self, data: str) -> None:
        await self.websocket.send_text(data)

    async def ping(self) -> None:
        await self.websocket.send_text(PING_FRAME)

    async def terminate(self, code: int, reason: str) -> None:
        if self.websocket.application_state != WebSocketState.DISCONNECTED:
            await self.websocket.close(code=code, reason=reason)
