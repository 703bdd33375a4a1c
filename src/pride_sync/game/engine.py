"""Per-game state engine tying the session, the order queue and the cache together."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pride_sync.client import orders
from pride_sync.game.queue import DEFAULT_ORDER_DELAY_SECONDS, OrderQueue
from pride_sync.game.scheduler import DEFAULT_REFRESH_INTERVAL_SECONDS, RefreshScheduler
from pride_sync.shared.errors import MalformedSnapshotError, SnapshotStoreError
from pride_sync.shared.events import EventBus, GameEvent
from pride_sync.universe import Fleet, Star, Universe

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pride_sync.client.session import OrderGateway, OrderResult
    from pride_sync.game.diagnostics import DiagnosticSink
    from pride_sync.game.persistence import SnapshotStore

logger = logging.getLogger(__name__)


def plan_fleet_split(total_ships: int, fleets: Sequence[Fleet]) -> list[tuple[Fleet, int]]:
    """Spread *total_ships* over *fleets* as evenly as possible.

    Every fleet receives ``total // len(fleets)`` ships and the remainder goes
    one ship at a time to the first fleets, so the targets always add up to
    *total_ships* exactly.
    """
    if not fleets:
        msg = "Cannot split ships without at least one fleet."
        raise ValueError(msg)
    if total_ships < 0:
        msg = "Cannot split a negative number of ships."
        raise ValueError(msg)
    share, remainder = divmod(total_ships, len(fleets))
    return [
        (fleet, share + 1 if index < remainder else share)
        for index, fleet in enumerate(fleets)
    ]


class Game:
    """Synchronize one game with the remote service.

    The game holds the current :class:`Universe` and replaces it whenever a
    refresh or an order returns a new snapshot. Every operation that talks to
    the service goes through one :class:`OrderQueue`, so refreshes and
    orders for the same game never interleave, and the current universe is
    only swapped from inside that serialized path.

    Listeners subscribe on :attr:`events`. ``STATE_UPDATED`` fires on every
    replacement of a real universe by another one, followed by
    ``TICK_CHANGED`` (and ``TURN_CHANGED`` for turn based games) when the
    tick moved within the same game. Adopting the first real universe, from
    the network or the cache, fires nothing.
    """

    def __init__(
        self,
        gateway: OrderGateway,
        game_id: str,
        name: str = "",
        *,
        universe: Universe | None = None,
        store: SnapshotStore | None = None,
        diagnostics: DiagnosticSink | None = None,
        order_delay_seconds: float = DEFAULT_ORDER_DELAY_SECONDS,
        refresh_interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
    ) -> None:
        self._gateway = gateway
        self._game_id = game_id
        self._name = name
        self._universe = universe or Universe.placeholder()
        self._store = store
        self._diagnostics = diagnostics
        self._order_delay = order_delay_seconds
        self._refresh_interval = refresh_interval_seconds
        self._order_queue: OrderQueue[Universe] | None = None
        self._scheduler: RefreshScheduler | None = None
        self.events = EventBus()

    def __repr__(self) -> str:
        return f"Game(game_id={self._game_id!r}, name={self._name!r})"

    @property
    def game_id(self) -> str:
        return self._game_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def universe(self) -> Universe:
        """The most recent universe, or the placeholder before the first fetch."""
        return self._universe

    @property
    def order_queue(self) -> OrderQueue[Universe]:
        """Queue serializing every call to the service, created on first use."""
        if self._order_queue is None:
            self._order_queue = OrderQueue(delay_seconds=self._order_delay)
        return self._order_queue

    @property
    def scheduler(self) -> RefreshScheduler | None:
        return self._scheduler

    async def refresh(self) -> Universe:
        """Fetch a full universe through the queue and adopt it."""
        logger.info("Fetching universe for game %s", self._game_id)

        async def fetch() -> Universe:
            universe = await self._gateway.fetch_snapshot(self._game_id)
            return await self._accept(universe)

        return await self.order_queue.enqueue(fetch)

    async def command(self, order: str) -> Universe:
        """Submit *order* through the queue and return the resulting universe.

        A bare acknowledgement leaves the current universe untouched and that
        universe is returned.
        """
        logger.info("Queueing order %r for game %s", order, self._game_id)

        async def submit() -> Universe:
            result = await self._gateway.submit_order(self._game_id, order)
            return await self._handle_result(result)

        return await self.order_queue.enqueue(submit)

    async def build_fleet(self, star: Star, ships: int = 1) -> Universe:
        """Build a new fleet at *star* carrying *ships*."""
        return await self.command(orders.new_fleet(star.id, ships))

    async def transfer_ships(self, fleet: Fleet, total_ships: int) -> Universe:
        """Move ships in or out of *fleet* until it carries *total_ships*."""
        return await self.command(orders.ship_transfer(fleet.id, total_ships))

    async def gather_all_ships(self, star: Star) -> Universe:
        """Move every ship at *star* into a single fleet."""
        return await self.command(orders.gather_all_ships(star.id))

    def total_ships_at(self, star: Star, player_id: int | None = None) -> int:
        return self._universe.total_ships_at(star, player_id)

    async def split_ships_to_fleets(self, star: Star) -> Universe:
        """Spread all of the account's ships at *star* evenly over its fleets there.

        The transfers target distinct fleets, so they are issued together; the
        order queue still submits them one after another.
        """
        universe = self._universe
        own_fleets = universe.fleets_at_star(star, universe.player_id)
        ships_at_star = universe.total_ships_at(star, universe.player_id)
        plan = plan_fleet_split(ships_at_star, own_fleets)
        transfers = [
            self.transfer_ships(fleet, target)
            for fleet, target in plan
            if target != fleet.ships
        ]
        logger.info(
            "Splitting %d ships at star %s over %d fleets in game %s",
            ships_at_star,
            star.id,
            len(own_fleets),
            self._game_id,
        )
        await asyncio.gather(*transfers)
        return self._universe

    async def load_or_refresh(self) -> Universe:
        """Adopt the cached universe when one is readable, otherwise fetch it.

        The cache is read from inside the order queue. A universe that landed
        while this call waited for its turn is kept, so the cache can never
        put an older tick back.
        """

        async def adopt_cached() -> Universe:
            if self._universe.is_real:
                return self._universe
            cached = await self._load_cached()
            if cached is None:
                return self._universe
            logger.info("Loaded universe from cache for game %s", self._game_id)
            await self._set_universe(cached)
            return cached

        universe = await self.order_queue.enqueue(adopt_cached)
        if universe.is_real:
            return universe

        logger.info("Cache data not found for game %s, fetching...", self._game_id)
        return await self.refresh()

    def start_refresh(self, interval_seconds: float | None = None) -> None:
        """Start (or restart) the periodic background refresh."""
        if self._scheduler is None:
            self._scheduler = RefreshScheduler(
                self.refresh,
                self.events,
                interval_seconds=self._refresh_interval,
                label=f"game {self._game_id}",
            )
        self._scheduler.start(interval_seconds)

    def stop_refresh(self) -> None:
        if self._scheduler is not None:
            self._scheduler.stop()

    def reset_refresh(self) -> None:
        """Restart the refresh countdown if the timer is running."""
        if self._scheduler is not None:
            self._scheduler.reset()

    async def close(self) -> None:
        """Stop background work owned by the game."""
        if self._scheduler is not None:
            await self._scheduler.shutdown()

    async def _handle_result(self, result: OrderResult) -> Universe:
        if result.universe is None:
            return self._universe
        return await self._accept(result.universe)

    async def _accept(self, universe: Universe) -> Universe:
        previous = self._universe
        await self._set_universe(universe)
        self._announce_changes(previous, universe)
        await self._save_universe()
        return universe

    async def _set_universe(self, universe: Universe) -> None:
        self._universe = universe
        if self._diagnostics is None:
            return
        try:
            await self._diagnostics.record(universe)
        except Exception:
            logger.exception(
                "Diagnostic sink failed recording universe for game %s", self._game_id
            )

    def _announce_changes(self, previous: Universe, current: Universe) -> None:
        if not (previous.is_real and current.is_real):
            return
        self.events.emit(GameEvent.STATE_UPDATED)
        if previous.is_same_game(current) and previous.tick != current.tick:
            logger.info(
                "Game %s advanced from tick %d to %d",
                self._game_id,
                previous.tick,
                current.tick,
            )
            self.events.emit(GameEvent.TICK_CHANGED, current.tick)
            if current.turn_based:
                self.events.emit(GameEvent.TURN_CHANGED, current.tick)

    async def _save_universe(self) -> None:
        universe = self._universe
        if self._store is None or not universe.is_real:
            return
        try:
            await self._store.save_snapshot(self._game_id, universe.raw_data)
        except SnapshotStoreError:
            logger.warning(
                "Could not persist universe for game %s", self._game_id, exc_info=True
            )

    async def _load_cached(self) -> Universe | None:
        if self._store is None:
            return None
        try:
            raw = await self._store.load_snapshot(self._game_id)
            if raw is None:
                return None
            return Universe.parse(self._game_id, raw)
        except (SnapshotStoreError, MalformedSnapshotError):
            logger.warning(
                "Ignoring unreadable cache for game %s", self._game_id, exc_info=True
            )
            return None


__all__ = ["Game", "plan_fleet_split"]
