"""Upstream side — the authenticated connection to the remote service.

Learn: The client never sees the API key. Every upstream dial carries
three headers the relay adds on the client's behalf:
- Authorization: Bearer <credential>
- User-Agent: a fixed identifier for this relay
- OpenAI-Beta: the protocol-beta opt-in the Realtime API requires

One dial per session, no retry. A rejected handshake keeps the HTTP
response on the error so the caller can log the upstream's status.
"""

import asyncio
from typing import Optional
from urllib.parse import urlsplit

import structlog
from websockets.asyncio.client import ClientConnection as WebSocketClient
from websockets.asyncio.client import connect
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedOK,
    InvalidHandshake,
    InvalidStatus,
    InvalidURI,
    WebSocketException,
)

from realtime_relay.config import ProxyConfig
from realtime_relay.relay.connection import Connection
from realtime_relay.relay.errors import (
    ConnectionClosedError,
    HandshakeFailedError,
    InvalidEndpointError,
    TransportError,
)
from realtime_relay.relay.frames import Frame

logger = structlog.get_logger()

USER_AGENT = "realtime-relay"
BETA_HEADER = ("OpenAI-Beta", "realtime=v1")
WEBSOCKET_SCHEMES = ("ws", "wss")


class UpstreamConnection(Connection):
    """Connection backed by a websockets asyncio client."""

    peer = "upstream"

    def __init__(self, websocket: WebSocketClient) -> None:
        super().__init__()
        self._websocket = websocket

    async def receive(self) -> Frame:
        self._ensure_open()
        try:
            message = await self._websocket.recv()
        except ConnectionClosedOK as e:
            raise ConnectionClosedError(f"upstream closed the connection ({e})") from e
        except ConnectionClosed as e:
            raise TransportError(f"upstream connection lost: {e}") from e
        return Frame.from_message(message)

    async def send(self, frame: Frame) -> None:
        self._ensure_open()
        try:
            await self._websocket.send(frame.to_message())
        except ConnectionClosedOK as e:
            raise ConnectionClosedError(f"upstream closed the connection ({e})") from e
        except ConnectionClosed as e:
            raise TransportError(f"upstream write failed: {e}") from e

    async def _close(self) -> None:
        # websockets performs the closing handshake, bounded by close_timeout
        try:
            await self._websocket.close()
        except asyncio.CancelledError:
            # Cancelled mid-handshake: websockets skips its own transport
            # teardown, so drop the TCP connection here
            self._websocket.transport.abort()
            raise


def validate_endpoint(endpoint: str) -> str:
    """Check that endpoint is a ws:// or wss:// URI with a host.

    Returns the endpoint unchanged. Raises InvalidEndpointError.
    """
    try:
        parts = urlsplit(endpoint)
        # .port parses lazily and raises on a non-numeric port
        parts.port
    except ValueError as e:
        raise InvalidEndpointError(f"malformed upstream endpoint: {e}") from e
    if parts.scheme not in WEBSOCKET_SCHEMES:
        raise InvalidEndpointError(
            f"upstream endpoint must use ws:// or wss://, got {parts.scheme or 'no'} scheme"
        )
    if not parts.hostname:
        raise InvalidEndpointError("upstream endpoint has no host")
    return endpoint


class UpstreamConnector:
    """Dials the fixed upstream endpoint with the relay's credentials."""

    def __init__(
        self,
        open_timeout: Optional[float] = 10.0,
        close_timeout: Optional[float] = 10.0,
    ) -> None:
        self.open_timeout = open_timeout
        self.close_timeout = close_timeout

    @staticmethod
    def build_headers(config: ProxyConfig) -> dict[str, str]:
        """Extra handshake headers. User-Agent is set via `user_agent_header` in connect()."""
        name, value = BETA_HEADER
        return {
            "Authorization": f"Bearer {config.credential}",
            name: value,
        }

    async def connect(self, config: ProxyConfig) -> UpstreamConnection:
        """Open one upstream WebSocket.

        Raises InvalidEndpointError for a bad URI and HandshakeFailedError
        for anything that goes wrong on the wire.
        """
        endpoint = validate_endpoint(config.upstream_endpoint)
        try:
            websocket = await connect(
                endpoint,
                additional_headers=self.build_headers(config),
                user_agent_header=USER_AGENT,
                open_timeout=self.open_timeout,
                close_timeout=self.close_timeout,
                max_size=None,
            )
        except InvalidURI as e:
            raise InvalidEndpointError(f"malformed upstream endpoint: {e}") from e
        except InvalidStatus as e:
            raise HandshakeFailedError(
                f"upstream rejected the handshake with HTTP {e.response.status_code}",
                cause=e,
                response=e.response,
            ) from e
        except (InvalidHandshake, OSError, TimeoutError) as e:
            raise HandshakeFailedError(
                f"upstream handshake failed: {e!r}", cause=e
            ) from e
        except WebSocketException as e:
            # e.g. InvalidProxy from proxy settings picked up from the environment
            raise HandshakeFailedError(
                f"upstream connection failed: {e!r}", cause=e
            ) from e

        logger.info("relay.upstream_connected", endpoint=redact_endpoint(endpoint))
        return UpstreamConnection(websocket)


def redact_endpoint(endpoint: str) -> str:
    """Endpoint without its query string, for log lines."""
    return endpoint.split("?", 1)[0]
