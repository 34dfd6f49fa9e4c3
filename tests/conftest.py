"""Test fixtures — in-memory connections and a real upstream stub.

Learn: Two levels of testing:
1. FakeConnection — an asyncio.Queue-backed Connection. Session and
   service tests script exactly what each side "receives" and inspect
   what each side was sent, with no sockets involved.
2. UpstreamStub — a real websockets server on a background thread.
   End-to-end tests point the app at it and drive the client side
   through Starlette's TestClient.
"""

import asyncio
import threading
from http import HTTPStatus
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from websockets.exceptions import ConnectionClosed
from websockets.sync.server import serve

from realtime_relay.config import ProxyConfig
from realtime_relay.main import create_app
from realtime_relay.relay.connection import Connection
from realtime_relay.relay.errors import ConnectionClosedError, TransportError
from realtime_relay.relay.frames import Frame, FrameKind
from realtime_relay.relay.service import ProxyService

_HANG_UP = object()
_CLOSED_LOCALLY = object()


def text(payload: str) -> Frame:
    return Frame(FrameKind.TEXT, payload.encode("utf-8"))


class FakeConnection(Connection):
    """Connection whose peer is the test."""

    def __init__(self, peer: str):
        super().__init__()
        self.peer = peer
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.sent: list[Frame] = []
        self.transport_closes = 0
        self.fail_writes = False

    # What the remote end does
    def feed(self, *frames: Frame) -> None:
        for frame in frames:
            self.inbox.put_nowait(frame)

    def hang_up(self) -> None:
        self.inbox.put_nowait(_HANG_UP)

    def break_down(self, reason: str = "connection reset by peer") -> None:
        self.inbox.put_nowait(TransportError(reason))

    # Connection interface
    async def receive(self) -> Frame:
        self._ensure_open()
        item = await self.inbox.get()
        if item is _HANG_UP:
            raise ConnectionClosedError(f"{self.peer} hung up")
        if item is _CLOSED_LOCALLY:
            raise ConnectionClosedError(f"{self.peer} closed locally")
        if isinstance(item, TransportError):
            raise item
        return item

    async def send(self, frame: Frame) -> None:
        self._ensure_open()
        if self.fail_writes:
            raise TransportError(f"write to {self.peer} failed")
        self.sent.append(frame)

    async def _close(self) -> None:
        self.transport_closes += 1
        self.inbox.put_nowait(_CLOSED_LOCALLY)


class StuckConnection(FakeConnection):
    """A connection whose reads never return, even after close()."""

    async def receive(self) -> Frame:
        await asyncio.Event().wait()


class UpstreamStub:
    """Threaded websockets server standing in for the real-time API.

    echo: send every message straight back
    close_after: close the connection after this many messages
    reject_status: refuse the handshake with this HTTP status
    """

    def __init__(self):
        self.echo = True
        self.close_after: Optional[int] = None
        self.reject_status: Optional[HTTPStatus] = None
        self.headers = []
        self.received: list = []
        self.closed = threading.Event()
        self._server = serve(
            self._handler, "127.0.0.1", 0, process_request=self._process_request
        )
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        port = self._server.socket.getsockname()[1]
        return f"ws://127.0.0.1:{port}/v1/realtime?model=test"

    def start(self) -> "UpstreamStub":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._server.shutdown()
        self._thread.join(timeout=5)

    def _process_request(self, connection, request):
        if self.reject_status is not None:
            return connection.respond(self.reject_status, "rejected by stub\n")
        return None

    def _handler(self, connection):
        self.headers.append(connection.request.headers)
        try:
            for message in connection:
                self.received.append(message)
                if self.echo:
                    connection.send(message)
                if self.close_after is not None and len(self.received) >= self.close_after:
                    connection.close()
                    break
        except ConnectionClosed:
            pass
        finally:
            self.closed.set()


@pytest.fixture()
def upstream_stub():
    stub = UpstreamStub().start()
    yield stub
    stub.stop()


@pytest.fixture()
def relay_service(upstream_stub):
    config = ProxyConfig(credential="sk-test", upstream_endpoint=upstream_stub.url)
    return ProxyService(config, drain_timeout=2.0)


@pytest.fixture()
def client(relay_service):
    """TestClient for an app wired to the upstream stub."""
    app = create_app(service=relay_service)
    with TestClient(app) as tc:
        yield tc
