"""WebSocket relay endpoint.

Learn: Each client connects to /ws. The route itself is thin — it hands
the raw WebSocket to ProxyService, which accepts it, dials upstream and
blocks until the session is over. When this coroutine returns, both
connections are already closed.
"""

from fastapi import APIRouter, WebSocket

router = APIRouter()


@router.websocket("/ws")
async def relay_websocket(websocket: WebSocket):
    """Relay one client to the upstream real-time service."""
    await websocket.app.state.proxy_service.handle(websocket)
