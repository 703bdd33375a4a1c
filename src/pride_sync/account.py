"""Single-account façade sharing one session across every game it plays."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pride_sync.game.engine import Game
from pride_sync.game.queue import DEFAULT_ORDER_DELAY_SECONDS
from pride_sync.game.scheduler import DEFAULT_REFRESH_INTERVAL_SECONDS
from pride_sync.shared.events import EventBus, GameEvent

if TYPE_CHECKING:
    from pride_sync.client.session import SessionClient
    from pride_sync.game.diagnostics import DiagnosticSink
    from pride_sync.game.persistence import SnapshotStore
    from pride_sync.universe import PlayerProfile

logger = logging.getLogger(__name__)


class Account:
    """Registry of the games played by the authenticated account.

    Games get the shared :class:`SessionClient` as their order gateway and
    never a reference back to the account. Every game event is re-published
    on :attr:`events` with the emitting :class:`Game` as first argument, so a
    consumer can subscribe once for all games.
    """

    def __init__(
        self,
        session: SessionClient,
        *,
        store: SnapshotStore | None = None,
        diagnostics: DiagnosticSink | None = None,
        order_delay_seconds: float = DEFAULT_ORDER_DELAY_SECONDS,
        refresh_interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
    ) -> None:
        self._session = session
        self._store = store
        self._diagnostics = diagnostics
        self._order_delay = order_delay_seconds
        self._refresh_interval = refresh_interval_seconds
        self._games: dict[str, Game] = {}
        self._unsubscribers: dict[str, list[Callable[[], None]]] = {}
        self.events = EventBus()

    @property
    def session(self) -> SessionClient:
        return self._session

    @property
    def games(self) -> dict[str, Game]:
        """Return a copy of the registered games keyed by game id."""
        return dict(self._games)

    def get_game(self, game_id: str) -> Game | None:
        return self._games.get(game_id)

    async def login(self, username: str, password: str) -> PlayerProfile:
        """Authenticate and return the account profile."""
        await self._session.authenticate(username, password)
        return await self._session.init_player()

    def add_game(self, game_id: str, name: str = "") -> Game:
        """Register a game, returning the existing one if already known."""
        existing = self._games.get(game_id)
        if existing is not None:
            return existing

        logger.info("Adding game %s (%s)", game_id, name)
        game = Game(
            self._session,
            game_id,
            name,
            store=self._store,
            diagnostics=self._diagnostics,
            order_delay_seconds=self._order_delay,
            refresh_interval_seconds=self._refresh_interval,
        )
        self._games[game_id] = game
        self._unsubscribers[game_id] = [
            game.events.subscribe(event, self._forwarder(game, event))
            for event in GameEvent
        ]
        return game

    async def remove_game(self, game_id: str) -> Game | None:
        """Unregister *game_id*, cancelling its refresh timer."""
        game = self._games.pop(game_id, None)
        if game is None:
            return None
        logger.info("Removing game %s", game_id)
        for unsubscribe in self._unsubscribers.pop(game_id, []):
            unsubscribe()
        await game.close()
        return game

    async def sync_games(self, profile: PlayerProfile) -> list[Game]:
        """Match the registry to the games listed in *profile*.

        Games the account joined are added, games it left are removed.
        Returns the newly added games.
        """
        listed = {game.number: game for game in profile.open_games}
        for game_id in [known for known in self._games if known not in listed]:
            await self.remove_game(game_id)
        return [
            self.add_game(game_id, open_game.name)
            for game_id, open_game in listed.items()
            if game_id not in self._games
        ]

    async def close(self) -> None:
        """Close every game, then the HTTP session."""
        for game_id in list(self._games):
            await self.remove_game(game_id)
        await self._session.close()

    def _forwarder(self, game: Game, event: GameEvent) -> Callable[..., None]:
        def forward(*args: Any) -> None:
            self.events.emit(event, game, *args)

        return forward


__all__ = ["Account"]
