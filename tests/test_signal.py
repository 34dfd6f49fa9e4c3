"""CompletionSignal tests — exactly once, many waiters."""

import asyncio

import pytest

from realtime_relay.relay.signal import CompletionSignal


@pytest.mark.asyncio
async def test_concurrent_fire_succeeds_exactly_once():
    signal = CompletionSignal()

    async def racer():
        await asyncio.sleep(0)
        return signal.fire()

    results = await asyncio.gather(*(racer() for _ in range(50)))

    assert results.count(True) == 1
    assert signal.fired


@pytest.mark.asyncio
async def test_all_waiters_released():
    signal = CompletionSignal()
    waiters = [asyncio.create_task(signal.wait()) for _ in range(5)]
    await asyncio.sleep(0)
    assert not any(w.done() for w in waiters)

    signal.fire()
    await asyncio.wait_for(asyncio.gather(*waiters), timeout=1)


@pytest.mark.asyncio
async def test_wait_after_fire_returns_immediately():
    signal = CompletionSignal()
    assert signal.fire() is True
    assert signal.fire() is False
    await asyncio.wait_for(signal.wait(), timeout=1)
