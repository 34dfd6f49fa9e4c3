"""Relay core — one inbound and one upstream WebSocket, piped together.

Learn: A proxied call flows through four pieces:
1. InboundAcceptor — completes the client's WebSocket handshake
2. UpstreamConnector — dials the remote service with auth headers
3. RelaySession — runs two DirectionalPumps, one per direction
4. ProxyService — wires the three together per incoming request

Whichever pump fails first tears the whole session down. There is no
half-duplex mode: if one leg is gone, the call is over.
"""

from realtime_relay.relay.errors import (
    ConnectError,
    ConnectionClosedError,
    HandshakeFailedError,
    InvalidEndpointError,
    RelayError,
    TransportError,
    UpgradeError,
)
from realtime_relay.relay.frames import Frame, FrameKind
from realtime_relay.relay.service import ProxyService
from realtime_relay.relay.session import RelaySession, SessionState

__all__ = [
    "ConnectError",
    "ConnectionClosedError",
    "Frame",
    "FrameKind",
    "HandshakeFailedError",
    "InvalidEndpointError",
    "ProxyService",
    "RelayError",
    "RelaySession",
    "SessionState",
    "TransportError",
    "UpgradeError",
]
