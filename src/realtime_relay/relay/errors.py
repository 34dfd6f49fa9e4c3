"""Relay error taxonomy.

Learn: Library exceptions (websockets, Starlette) are translated into
these at the connection boundary. Session logic only ever sees
RelayError subclasses, so it never needs to know which library sits
underneath a Connection.

None of these are retried. Errors before a session starts abort the
request; errors inside a running session tear the session down.
"""

from typing import Any, Optional


class RelayError(Exception):
    """Base class for every error raised by the relay."""


class UpgradeError(RelayError):
    """Raised when the inbound WebSocket handshake did not complete."""


class ConnectError(RelayError):
    """Raised when the upstream connection could not be established."""


class InvalidEndpointError(ConnectError):
    """Raised when the upstream endpoint is not a usable ws:// or wss:// URI."""


class HandshakeFailedError(ConnectError):
    """Raised when the upstream WebSocket handshake failed.

    `cause` is the underlying exception. `response` is the HTTP response
    the upstream answered with, when it answered at all (a rejected
    handshake), and None for network or TLS failures.
    """

    def __init__(self, message: str, cause: BaseException, response: Optional[Any] = None):
        super().__init__(message)
        self.cause = cause
        self.response = response

    @property
    def status_code(self) -> Optional[int]:
        return getattr(self.response, "status_code", None)


class TransportError(RelayError):
    """Raised when a read or write fails on a running connection."""


class ConnectionClosedError(TransportError):
    """Raised when the peer closed the connection in an orderly way."""
