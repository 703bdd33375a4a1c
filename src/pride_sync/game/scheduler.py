"""Repeating background refresh of a single game."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pride_sync.shared.events import EventBus, GameEvent

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL_SECONDS = 10.0

RefreshCallable = Callable[[], Awaitable[Any]]


class RefreshScheduler:
    """Asynchronous timer calling *refresh* every ``interval_seconds``.

    Every cycle publishes ``REFRESH_STARTING`` followed by either
    ``REFRESH_COMPLETE`` or ``REFRESH_ERROR``. A failing cycle is logged and
    the timer keeps going. Cycles never overlap because the next wait only
    starts once the previous refresh has returned.
    """

    def __init__(
        self,
        refresh: RefreshCallable,
        events: EventBus,
        *,
        interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
        label: str = "game",
    ) -> None:
        self._refresh = refresh
        self._events = events
        self._interval = self._validate_interval(interval_seconds)
        self._label = label
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        """Return True while a timer task is active."""
        return self._task is not None and not self._task.done()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    def start(self, interval_seconds: float | None = None) -> None:
        """(Re)start the timer, stopping any timer already running."""
        self.stop()
        if interval_seconds is not None:
            self._interval = self._validate_interval(interval_seconds)
        self._task = asyncio.create_task(self._loop())

    def stop(self) -> None:
        """Cancel the timer and clear its handle."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def reset(self) -> None:
        """Restart the countdown if the timer is running; otherwise do nothing."""
        if self._task is not None:
            self.start()

    async def shutdown(self) -> None:
        """Stop the timer and wait for its task to unwind."""
        task = self._task
        self.stop()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def run_cycle(self) -> bool:
        """Run one refresh cycle and report whether it succeeded."""
        logger.info("Refreshing universe for %s", self._label)
        self._events.emit(GameEvent.REFRESH_STARTING)
        try:
            await self._refresh()
        except Exception as exc:
            logger.error("Error refreshing %s", self._label, exc_info=exc)
            self._events.emit(GameEvent.REFRESH_ERROR, exc)
            return False
        self._events.emit(GameEvent.REFRESH_COMPLETE)
        return True

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.run_cycle()

    @staticmethod
    def _validate_interval(interval_seconds: float) -> float:
        if interval_seconds <= 0:
            msg = "Refresh interval must be positive."
            raise ValueError(msg)
        return interval_seconds


__all__ = ["DEFAULT_REFRESH_INTERVAL_SECONDS", "RefreshCallable", "RefreshScheduler"]
