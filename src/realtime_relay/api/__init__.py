"""Route aggregation.

All routers registered here get mounted in main.py. Both routes are
open — the relay does not authenticate its own clients.
"""

from fastapi import APIRouter

from realtime_relay.api.health import router as health_router
from realtime_relay.api.websocket import router as websocket_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(websocket_router, tags=["relay"])
