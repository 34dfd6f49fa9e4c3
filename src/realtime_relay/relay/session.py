"""Relay session — two pumps, one completion signal, joint teardown.

Learn: A session is one proxied call. It runs two pumps as independent
asyncio tasks:
1. client → upstream
2. upstream → client

The first pump to hit a terminal condition (orderly close, read error,
write error) fires the completion signal and closes BOTH connections.
Closing a connection makes any read or write blocked on it fail, which
is how the other pump finds out and unwinds.

run() joins both tasks before returning, so nothing touches either
connection after the session reports CLOSED. A pump that does not
unwind within `drain_timeout` after the signal is cancelled.
"""

import asyncio
import enum
from typing import Optional

import structlog

from realtime_relay.relay.connection import Connection
from realtime_relay.relay.errors import ConnectionClosedError, TransportError
from realtime_relay.relay.signal import CompletionSignal

logger = structlog.get_logger()


class SessionState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    CLOSING = "closing"
    CLOSED = "closed"


class DirectionalPump:
    """Forwards frames from one connection to the other until either fails."""

    def __init__(
        self,
        source: Connection,
        destination: Connection,
        signal: CompletionSignal,
    ) -> None:
        self.source = source
        self.destination = destination
        self.signal = signal
        self.forwarded = 0

    @property
    def direction(self) -> str:
        return f"{self.source.peer}->{self.destination.peer}"

    async def run(self) -> None:
        try:
            while True:
                frame = await self.source.receive()
                await self.destination.send(frame)
                self.forwarded += 1
        except ConnectionClosedError as e:
            logger.info(
                "relay.pump_closed",
                direction=self.direction,
                reason=str(e),
                forwarded=self.forwarded,
            )
        except TransportError as e:
            logger.warning(
                "relay.pump_error",
                direction=self.direction,
                error=str(e),
                forwarded=self.forwarded,
            )
        finally:
            # Also runs on cancellation — the session must still come down
            if self.signal.fire():
                logger.debug("relay.session_closing", triggered_by=self.direction)
            await self.source.close()
            await self.destination.close()


class RelaySession:
    """Owns one client/upstream connection pair for the life of one call."""

    def __init__(
        self,
        client: Connection,
        upstream: Connection,
        drain_timeout: Optional[float] = 5.0,
    ) -> None:
        self.client = client
        self.upstream = upstream
        self.drain_timeout = drain_timeout
        self.signal = CompletionSignal()
        self.state = SessionState.IDLE
        self.pumps = (
            DirectionalPump(client, upstream, self.signal),
            DirectionalPump(upstream, client, self.signal),
        )

    async def run(self) -> None:
        """Relay until either side goes away. Runs at most once."""
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"session already {self.state.value}")

        self.state = SessionState.RUNNING
        tasks = [
            asyncio.create_task(pump.run(), name=f"relay-pump {pump.direction}")
            for pump in self.pumps
        ]
        logger.info("relay.session_started")

        try:
            await self.signal.wait()
            self.state = SessionState.CLOSING

            _, pending = await asyncio.wait(tasks, timeout=self.drain_timeout)
            for task in pending:
                logger.warning("relay.pump_stuck", task=task.get_name())
                task.cancel()
        finally:
            # Outer cancellation lands here with both pumps still running
            for task in tasks:
                if not task.done():
                    task.cancel()
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for task, result in zip(tasks, results):
                if isinstance(result, Exception):
                    logger.error(
                        "relay.pump_crashed", task=task.get_name(), error=repr(result)
                    )
            await self.client.close()
            await self.upstream.close()
            self.state = SessionState.CLOSED

        logger.info(
            "relay.session_ended",
            client_to_upstream=self.pumps[0].forwarded,
            upstream_to_client=self.pumps[1].forwarded,
        )
