"""Change notifications published by games and consumed by outside layers."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class GameEvent(StrEnum):
    """Kinds of notifications a game can publish."""

    STATE_UPDATED = "state_updated"
    TICK_CHANGED = "tick_changed"
    TURN_CHANGED = "turn_changed"
    REFRESH_STARTING = "refresh_starting"
    REFRESH_COMPLETE = "refresh_complete"
    REFRESH_ERROR = "refresh_error"


class EventBus:
    """Explicit subscription list keyed by :class:`GameEvent`.

    Listeners may be plain callables or coroutine functions. Coroutines are
    scheduled on the running loop so a slow listener never holds up the
    order queue that emitted the event.
    """

    def __init__(self) -> None:
        self._listeners: dict[GameEvent, list[Listener]] = {}
        self._pending: set[asyncio.Task[Any]] = set()

    def subscribe(self, event: GameEvent, listener: Listener) -> Callable[[], None]:
        """Register *listener* for *event* and return a function removing it."""
        listeners = self._listeners.setdefault(event, [])
        listeners.append(listener)

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def listeners(self, event: GameEvent) -> tuple[Listener, ...]:
        """Return the listeners currently registered for *event*."""
        return tuple(self._listeners.get(event, ()))

    def emit(self, event: GameEvent, *args: Any) -> None:
        """Call every listener of *event* with *args* in subscription order."""
        for listener in self.listeners(event):
            try:
                result = listener(*args)
            except Exception:
                logger.exception("Listener %r failed handling %s", listener, event)
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._settle)

    def _settle(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Async listener failed", exc_info=exc)

    def clear(self) -> None:
        """Drop every registered listener."""
        self._listeners.clear()


__all__ = ["EventBus", "GameEvent", "Listener"]
