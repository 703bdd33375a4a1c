"""Per-game serialization of order submissions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_ORDER_DELAY_SECONDS = 0.1

_T = TypeVar("_T")

OrderTask = Callable[[], Awaitable[_T]]


class OrderQueue(Generic[_T]):
    """Run order-producing tasks one at a time, in the order they were queued.

    Each call to :meth:`enqueue` chains the new task behind the current tail
    of the queue, so its position is fixed the moment ``enqueue`` returns,
    not when the caller first awaits. Before a task starts the queue waits
    ``delay_seconds`` after the previous task settled. A task that raises
    only fails its own awaiter; the next task still runs.

    Callers receive a shielded future: cancelling it abandons the result
    but leaves the queued task, and therefore the chain, untouched.
    """

    def __init__(self, *, delay_seconds: float = DEFAULT_ORDER_DELAY_SECONDS) -> None:
        if delay_seconds < 0:
            msg = "Order delay must be non-negative."
            raise ValueError(msg)
        self._delay = delay_seconds
        self._tail: asyncio.Task[_T] | None = None
        self._pending = 0

    @property
    def delay_seconds(self) -> float:
        return self._delay

    @property
    def pending(self) -> int:
        """Number of tasks queued or running."""
        return self._pending

    def enqueue(self, task: OrderTask[_T]) -> asyncio.Future[_T]:
        """Append *task* to the chain and return a future resolving to its result."""
        previous = self._tail
        link = asyncio.ensure_future(self._run_after(previous, task))
        self._pending += 1
        link.add_done_callback(self._settle)
        self._tail = link
        return asyncio.shield(link)

    async def _run_after(
        self, previous: asyncio.Task[_T] | None, task: OrderTask[_T]
    ) -> _T:
        if previous is not None and not previous.done():
            # asyncio.wait never raises the previous task's error.
            await asyncio.wait((previous,))
        await asyncio.sleep(self._delay)
        return await task()

    def _settle(self, link: asyncio.Task[_T]) -> None:
        self._pending -= 1
        if link is self._tail and link.done():
            self._tail = None


__all__ = ["DEFAULT_ORDER_DELAY_SECONDS", "OrderQueue", "OrderTask"]
