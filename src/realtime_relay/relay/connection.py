"""Connection — the full-duplex message channel a pump reads and writes.

Learn: Each session owns exactly two of these, `client` and `upstream`.
Concrete classes wrap a library object (Starlette WebSocket on the
inbound side, a websockets client connection on the upstream side) and
translate its exceptions into TransportError.

Both pumps close both connections when they stop, so a connection can
see several close() calls. Only the first one reaches the transport.
"""

from abc import ABC, abstractmethod

from realtime_relay.relay.errors import ConnectionClosedError
from realtime_relay.relay.frames import Frame


class Connection(ABC):
    """Abstract full-duplex, message-oriented channel."""

    #: Short label used in log lines ("client", "upstream").
    peer: str = "connection"

    def __init__(self) -> None:
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @abstractmethod
    async def receive(self) -> Frame:
        """Read the next frame. Raises TransportError when the channel fails or closes."""

    @abstractmethod
    async def send(self, frame: Frame) -> None:
        """Write one frame unmodified. Raises TransportError on failure."""

    async def close(self) -> None:
        """Close the channel. Safe to call any number of times."""
        if self._closed:
            return
        self._closed = True
        await self._close()

    @abstractmethod
    async def _close(self) -> None:
        """Close the underlying transport. Called at most once."""

    def _ensure_open(self) -> None:
        if self._closed:
            raise ConnectionClosedError(f"{self.peer} connection is closed")

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {self.peer} {state}>"
