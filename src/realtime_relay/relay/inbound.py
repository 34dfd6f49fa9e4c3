"""Inbound side — the local client's WebSocket.

Learn: The ASGI server (uvicorn) has already parsed the HTTP upgrade
request by the time our route runs; accept() sends the 101 and turns
the request into a full-duplex channel.

There is no origin check and no client authentication. The relay is
meant to run on a trusted network or behind a reverse proxy that does
both; the credential it holds is the upstream's, not the client's.
"""

import structlog
from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from realtime_relay.relay.connection import Connection
from realtime_relay.relay.errors import (
    ConnectionClosedError,
    TransportError,
    UpgradeError,
)
from realtime_relay.relay.frames import Frame, FrameKind

logger = structlog.get_logger()


class ClientConnection(Connection):
    """Connection backed by an accepted Starlette WebSocket."""

    peer = "client"

    def __init__(self, websocket: WebSocket) -> None:
        super().__init__()
        self._websocket = websocket

    async def receive(self) -> Frame:
        self._ensure_open()
        try:
            message = await self._websocket.receive()
        except (RuntimeError, OSError) as e:
            raise TransportError(f"client read failed: {e}") from e

        if message["type"] == "websocket.disconnect":
            raise ConnectionClosedError(
                f"client closed the connection (code={message.get('code')})"
            )

        text = message.get("text")
        if text is not None:
            return Frame(FrameKind.TEXT, text.encode("utf-8"))
        data = message.get("bytes")
        if data is not None:
            return Frame(FrameKind.BINARY, data)
        raise TransportError(f"unexpected ASGI message: {message['type']}")

    async def send(self, frame: Frame) -> None:
        self._ensure_open()
        try:
            if frame.kind is FrameKind.TEXT:
                await self._websocket.send_text(frame.to_message())
            else:
                await self._websocket.send_bytes(frame.payload)
        except WebSocketDisconnect as e:
            raise ConnectionClosedError(f"client went away (code={e.code})") from e
        except (RuntimeError, OSError) as e:
            raise TransportError(f"client write failed: {e}") from e

    async def _close(self) -> None:
        ws = self._websocket
        if (
            ws.application_state != WebSocketState.CONNECTED
            or ws.client_state != WebSocketState.CONNECTED
        ):
            return
        try:
            await ws.close()
        except (RuntimeError, OSError) as e:
            # Client vanished between the state check and the close frame
            logger.debug("relay.client_close_failed", error=str(e))


class InboundAcceptor:
    """Completes the WebSocket handshake for one incoming request."""

    async def upgrade(self, websocket: WebSocket) -> ClientConnection:
        """Accept the upgrade from any origin.

        Raises UpgradeError if the handshake cannot be completed.
        """
        try:
            await websocket.accept()
        except (RuntimeError, OSError, WebSocketDisconnect) as e:
            raise UpgradeError(f"WebSocket upgrade failed: {e}") from e
        return ClientConnection(websocket)
