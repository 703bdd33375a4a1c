"""Tests for the per-game order queue."""

from __future__ import annotations

import asyncio

import pytest

from pride_sync.game.queue import OrderQueue


def test_tasks_run_one_at_a_time_in_enqueue_order() -> None:
    spans: list[tuple[int, float, float]] = []
    active = 0
    peak = 0

    def make_task(index: int, duration: float):
        async def task() -> int:
            nonlocal active, peak
            loop = asyncio.get_running_loop()
            active += 1
            peak = max(peak, active)
            started = loop.time()
            await asyncio.sleep(duration)
            active -= 1
            spans.append((index, started, loop.time()))
            return index

        return task

    async def scenario() -> list[int]:
        queue: OrderQueue[int] = OrderQueue(delay_seconds=0.0)
        # Later tasks are shorter, so any overlap would reorder completions.
        futures = [queue.enqueue(make_task(i, 0.02 * (5 - i))) for i in range(5)]
        return list(await asyncio.gather(*futures))

    results = asyncio.run(scenario())

    assert results == [0, 1, 2, 3, 4]
    assert [index for index, _, _ in spans] == [0, 1, 2, 3, 4]
    assert peak == 1
    for (_, _, previous_end), (_, next_start, _) in zip(spans, spans[1:]):
        assert next_start >= previous_end


def test_settling_delay_separates_tasks() -> None:
    starts: list[float] = []

    async def task() -> None:
        starts.append(asyncio.get_running_loop().time())

    async def scenario() -> None:
        queue: OrderQueue[None] = OrderQueue(delay_seconds=0.05)
        await asyncio.gather(queue.enqueue(task), queue.enqueue(task), queue.enqueue(task))

    asyncio.run(scenario())

    gaps = [later - earlier for earlier, later in zip(starts, starts[1:])]
    assert all(gap >= 0.045 for gap in gaps)


def test_failing_task_does_not_break_the_chain() -> None:
    ran: list[str] = []

    async def ok(label: str) -> str:
        ran.append(label)
        return label

    async def boom() -> str:
        ran.append("boom")
        msg = "order rejected"
        raise RuntimeError(msg)

    async def scenario() -> tuple[str, BaseException | str, str]:
        queue: OrderQueue[str] = OrderQueue(delay_seconds=0.0)
        first = queue.enqueue(lambda: ok("first"))
        failing = queue.enqueue(boom)
        last = queue.enqueue(lambda: ok("last"))
        return tuple(await asyncio.gather(first, failing, last, return_exceptions=True))

    first, failure, last = asyncio.run(scenario())

    assert first == "first"
    assert isinstance(failure, RuntimeError)
    assert last == "last"
    assert ran == ["first", "boom", "last"]


def test_position_is_fixed_when_enqueued() -> None:
    order: list[str] = []

    def record(label: str):
        async def task() -> str:
            order.append(label)
            return label

        return task

    async def scenario() -> None:
        queue: OrderQueue[str] = OrderQueue(delay_seconds=0.0)
        first = queue.enqueue(record("a"))
        second = queue.enqueue(record("b"))
        third = queue.enqueue(record("c"))
        # Await in reverse; execution must still follow enqueue order.
        assert await third == "c"
        assert await second == "b"
        assert await first == "a"

    asyncio.run(scenario())
    assert order == ["a", "b", "c"]


def test_cancelling_a_waiter_keeps_tasks_serialized() -> None:
    active = 0
    peak = 0
    finished: list[str] = []

    def make_task(label: str):
        async def task() -> str:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.02)
            active -= 1
            finished.append(label)
            return label

        return task

    async def scenario() -> str:
        queue: OrderQueue[str] = OrderQueue(delay_seconds=0.0)
        queue.enqueue(make_task("a"))
        abandoned = queue.enqueue(make_task("b"))
        last = queue.enqueue(make_task("c"))
        await asyncio.sleep(0.005)
        abandoned.cancel()
        return await last

    assert asyncio.run(scenario()) == "c"
    assert peak == 1
    assert finished == ["a", "b", "c"]


def test_pending_counts_queued_and_running_tasks() -> None:
    async def task() -> None:
        await asyncio.sleep(0.01)

    async def scenario() -> tuple[int, int]:
        queue: OrderQueue[None] = OrderQueue(delay_seconds=0.0)
        futures = [queue.enqueue(task) for _ in range(3)]
        during = queue.pending
        await asyncio.gather(*futures)
        return during, queue.pending

    assert asyncio.run(scenario()) == (3, 0)


def test_negative_delay_is_rejected() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        OrderQueue(delay_seconds=-0.1)
