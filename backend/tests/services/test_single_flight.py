"""Single-Flight Tests — coalescing, fan-out, release, and cancellation isolation."""

import asyncio

import pytest

from app.services.single_flight import SingleFlight


async def test_concurrent_calls_share_one_execution():
    flight = SingleFlight[int]()
    calls = 0

    async def work():
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return 7

    results = await asyncio.gather(*(flight.do("k", work) for _ in range(4)))

    assert results == [7, 7, 7, 7]
    assert calls == 1


async def test_distinct_keys_run_independently():
    flight = SingleFlight[str]()
    seen = []

    async def work(key):
        seen.append(key)
        await asyncio.sleep(0)
        return key.upper()

    a, b = await asyncio.gather(
        flight.do("a", lambda: work("a")), flight.do("b", lambda: work("b")),
    )

    assert (a, b) == ("A", "B")
    assert sorted(seen) == ["a", "b"]


async def test_exception_fans_out_to_every_waiter():
    flight = SingleFlight[int]()

    async def boom():
        await asyncio.sleep(0.01)
        raise ValueError("upstream down")

    outcomes = await asyncio.gather(
        *(flight.do("k", boom) for _ in range(3)), return_exceptions=True,
    )

    assert all(isinstance(o, ValueError) for o in outcomes)


async def test_key_released_after_completion():
    flight = SingleFlight[int]()
    calls = 0

    async def work():
        nonlocal calls
        calls += 1
        return calls

    assert await flight.do("k", work) == 1
    assert len(flight) == 0
    assert await flight.do("k", work) == 2


async def test_cancelled_waiter_does_not_cancel_shared_task():
    flight = SingleFlight[str]()
    release = asyncio.Event()

    async def work():
        await release.wait()
        return "done"

    leader = asyncio.create_task(flight.do("k", work))
    follower = asyncio.create_task(flight.do("k", work))
    await asyncio.sleep(0)

    leader.cancel()
    with pytest.raises(asyncio.CancelledError):
        await leader

    release.set()
    assert await follower == "done"
