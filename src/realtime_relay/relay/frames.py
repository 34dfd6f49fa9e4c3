"""WebSocket frames as the relay sees them.

Learn: A frame is a kind tag plus raw bytes, nothing more. The relay
never parses payloads — text frames are carried as their UTF-8 bytes
and only decoded at the edge where a transport API wants a str.

Ping/pong are answered by each leg's own WebSocket implementation and
a close frame surfaces as ConnectionClosedError, so only data frames
ever travel through a pump.
"""

import enum
from dataclasses import dataclass
from typing import Union


class FrameKind(str, enum.Enum):
    TEXT = "text"
    BINARY = "binary"


@dataclass(frozen=True)
class Frame:
    """One data frame, forwarded opaquely."""

    kind: FrameKind
    payload: bytes

    @classmethod
    def from_message(cls, message: Union[str, bytes]) -> "Frame":
        """Build a frame from a str (text) or bytes (binary) message."""
        if isinstance(message, str):
            return cls(FrameKind.TEXT, message.encode("utf-8"))
        return cls(FrameKind.BINARY, bytes(message))

    def to_message(self) -> Union[str, bytes]:
        """Inverse of from_message — str for text frames, bytes otherwise."""
        if self.kind is FrameKind.TEXT:
            return self.payload.decode("utf-8")
        return self.payload
