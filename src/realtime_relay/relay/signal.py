"""One-shot completion signal shared by the two pumps of a session."""

import asyncio


class CompletionSignal:
    """Exactly-once, many-waiters "session is over" event.

    Learn: Both pumps race to fire this when their leg fails. fire()
    checks and sets in one synchronous step — the event loop cannot
    switch tasks in between — so exactly one caller sees True and
    every other call is a no-op.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def fire(self) -> bool:
        """Fire the signal. Returns True only for the call that fired it."""
        if self._fired:
            return False
        self._fired = True
        self._event.set()
        return True

    async def wait(self) -> None:
        await self._event.wait()
