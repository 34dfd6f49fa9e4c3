"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The ProxyService is built here, once, and stored on
app.state so routes can reach it without module-level globals.

There is no module-level `app`: building one needs an API key, and
importing this module should not. Run with the CLI, or with
`uvicorn realtime_relay.main:create_app --factory`.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from realtime_relay import __version__
from realtime_relay.api import api_router
from realtime_relay.config import ProxyConfig, Settings, settings as default_settings
from realtime_relay.relay.service import ProxyService
from realtime_relay.relay.upstream import UpstreamConnector, redact_endpoint

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logging.

    Learn: Anything before `yield` runs at startup, after `yield` at
    shutdown. Open sessions are not drained here; uvicorn cancels their
    handlers, and RelaySession closes both legs on cancellation.
    """
    service: ProxyService = app.state.proxy_service
    logger.info(
        "relay.starting",
        version=__version__,
        upstream=redact_endpoint(service.config.upstream_endpoint),
    )

    yield

    logger.info("relay.shutdown", active_sessions=service.active_sessions)


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[ProxyService] = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Raises ValueError when no credential is configured.
    """
    settings = settings or default_settings
    if service is None:
        service = ProxyService(
            ProxyConfig.from_settings(settings),
            connector=UpstreamConnector(
                open_timeout=settings.open_timeout,
                close_timeout=settings.close_timeout,
            ),
            drain_timeout=settings.drain_timeout,
        )

    app = FastAPI(
        title="realtime-relay",
        description="Transparent WebSocket relay for real-time APIs",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.proxy_service = service

    app.include_router(api_router)

    return app
