"""Health check endpoint."""

from fastapi import APIRouter, Request

from realtime_relay import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Report server status and how many sessions are being relayed."""
    service = request.app.state.proxy_service
    return {
        "status": "ok",
        "version": __version__,
        "active_sessions": service.active_sessions,
    }
