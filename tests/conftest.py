"""Test configuration and fixtures for the client test suite."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from pride_sync.client.orders import FULL_UNIVERSE_REPORT
from pride_sync.client.session import OrderResult
from pride_sync.settings import get_settings
from pride_sync.shared.errors import UnexpectedResponseError
from pride_sync.universe import Universe

RawFactory = Callable[..., dict[str, Any]]


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure settings are loaded with predictable values during tests."""
    monkeypatch.setenv("NEPTUNES_PRIDE_USERNAME", "test-user")
    monkeypatch.setenv("NEPTUNES_PRIDE_PASSWORD", "test-password")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_raw_universe(
    *,
    tick: int = 5,
    turn_based: int = 0,
    name: str = "Test Galaxy",
    player_uid: int = 1,
    stars: list[dict[str, Any]] | None = None,
    fleets: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build a raw ``full_universe_report`` payload shaped like the service's."""
    if stars is None:
        stars = [
            {"uid": 10, "puid": 1, "n": "Sol", "st": 12},
            {"uid": 11, "puid": 2, "n": "Vega", "st": 7},
            {"uid": 12, "puid": -1, "n": "Rigel", "st": 0},
        ]
    if fleets is None:
        fleets = [
            {"uid": 100, "puid": 1, "n": "Sol I", "st": 3, "ouid": 10},
            {"uid": 101, "puid": 1, "n": "Sol II", "st": 1, "ouid": 10},
            {"uid": 102, "puid": 2, "n": "Raider", "st": 5, "ouid": 10},
            {"uid": 103, "puid": 1, "n": "Scout", "st": 2},
        ]
    return {
        "name": name,
        "player_uid": player_uid,
        "stars": {str(star["uid"]): star for star in stars},
        "fleets": {str(fleet["uid"]): fleet for fleet in fleets},
        "players": {},
        "started": True,
        "start_time": 1_500_000_000,
        "paused": False,
        "game_over": 0,
        "now": 1_500_003_600,
        "turn_based": turn_based,
        "turn_based_time_out": 0,
        "production_rate": 24,
        "production_counter": tick % 24,
        "tick": tick,
        "tick_rate": 60,
    }


@pytest.fixture
def raw_universe() -> RawFactory:
    """Factory fixture returning fresh raw universe payloads."""
    return make_raw_universe


class FakeGateway:
    """Scripted stand-in for :class:`SessionClient` recording every order.

    Responses are consumed in execution order: a raw payload answers with a
    full universe, ``None`` with an acknowledgement and an exception is
    raised. When the script is exhausted orders are acknowledged.
    """

    def __init__(self, *, latency: float = 0.0) -> None:
        self.latency = latency
        self.calls: list[tuple[str, str]] = []
        self.spans: list[tuple[str, float, float]] = []
        self.max_concurrent = 0
        self._active = 0
        self._responses: deque[dict[str, Any] | BaseException | None] = deque()

    def queue_universe(self, raw: dict[str, Any]) -> None:
        self._responses.append(raw)

    def queue_ack(self) -> None:
        self._responses.append(None)

    def queue_error(self, exc: BaseException) -> None:
        self._responses.append(exc)

    @property
    def orders(self) -> list[str]:
        return [order for _, order in self.calls]

    async def submit_order(self, game_id: str, order: str) -> OrderResult:
        loop = asyncio.get_running_loop()
        self.calls.append((game_id, order))
        self._active += 1
        self.max_concurrent = max(self.max_concurrent, self._active)
        started = loop.time()
        try:
            await asyncio.sleep(self.latency)
            response = self._responses.popleft() if self._responses else None
            if isinstance(response, BaseException):
                raise response
            if response is None:
                return OrderResult(event="order:ok")
            return OrderResult(
                event="order:full_universe",
                universe=Universe.parse(game_id, response),
            )
        finally:
            self._active -= 1
            self.spans.append((order, started, loop.time()))

    async def fetch_snapshot(self, game_id: str) -> Universe:
        result = await self.submit_order(game_id, FULL_UNIVERSE_REPORT)
        if result.universe is None:
            msg = "Full universe report was only acknowledged."
            raise UnexpectedResponseError(msg, result.event)
        return result.universe


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def slow_gateway() -> FakeGateway:
    """Gateway whose calls take long enough for overlaps to show up."""
    return FakeGateway(latency=0.01)
