"""ProxyService — entry point invoked once per inbound WebSocket request.

Learn: Step order matters. The client is accepted first, then upstream
is dialled, then the session runs:
- upgrade fails → nothing else happens, nothing is held
- upstream fails → the accepted client is closed, no pumps start
- both succeed → handle() blocks until the session is CLOSED

Every log line for one request carries the same session_id, bound via
structlog contextvars (the pump tasks inherit the binding).
"""

import uuid
from typing import Optional

import structlog
from fastapi import WebSocket

from realtime_relay.config import ProxyConfig
from realtime_relay.relay.errors import (
    ConnectError,
    HandshakeFailedError,
    UpgradeError,
)
from realtime_relay.relay.inbound import InboundAcceptor
from realtime_relay.relay.session import RelaySession
from realtime_relay.relay.upstream import UpstreamConnector, redact_endpoint

logger = structlog.get_logger()


class ProxyService:
    """Accepts, dials, relays. One call to handle() per proxied session."""

    def __init__(
        self,
        config: ProxyConfig,
        acceptor: Optional[InboundAcceptor] = None,
        connector: Optional[UpstreamConnector] = None,
        drain_timeout: Optional[float] = 5.0,
    ) -> None:
        self.config = config
        self.acceptor = acceptor or InboundAcceptor()
        self.connector = connector or UpstreamConnector()
        self.drain_timeout = drain_timeout
        self.active_sessions = 0

    async def handle(self, websocket: WebSocket) -> None:
        with structlog.contextvars.bound_contextvars(session_id=uuid.uuid4().hex):
            await self._handle(websocket)

    async def _handle(self, websocket: WebSocket) -> None:
        try:
            client = await self.acceptor.upgrade(websocket)
        except UpgradeError as e:
            logger.warning("relay.upgrade_failed", error=str(e))
            return

        try:
            upstream = await self.connector.connect(self.config)
        except ConnectError as e:
            logger.error(
                "relay.upstream_failed",
                endpoint=redact_endpoint(self.config.upstream_endpoint),
                error=str(e),
                status=e.status_code if isinstance(e, HandshakeFailedError) else None,
            )
            await client.close()
            return

        session = RelaySession(client, upstream, drain_timeout=self.drain_timeout)
        self.active_sessions += 1
        try:
            await session.run()
        finally:
            self.active_sessions -= 1
