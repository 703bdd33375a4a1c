"""Immutable universe snapshots and the pure queries run over them."""

from __future__ import annotations

import copy
import html
from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.config import ConfigDict

from pride_sync.shared.errors import MalformedSnapshotError
from pride_sync.universe.entities import Fleet, Star

EMPTY_UNIVERSE_ID = "x"

EMPTY_UNIVERSE_DATA: dict[str, Any] = {
    "name": "Empty universe",
    "player_uid": -1,
    "stars": {},
    "fleets": {},
    "players": {},
    "started": False,
    "start_time": -1,
    "paused": False,
    "game_over": 0,
    "now": 0,
    "turn_based": 0,
    "turn_based_time_out": 0,
    "production_rate": 0,
    "production_counter": 0,
    "tick": 0,
    "tick_rate": 0,
}


class _UniverseReport(BaseModel):
    """Wire shape of a ``full_universe_report`` payload."""

    model_config = ConfigDict(extra="ignore")

    name: str
    player_uid: int
    stars: dict[str, Star]
    fleets: dict[str, Fleet]
    tick: int = Field(..., ge=0)

    started: bool = False
    start_time: int = -1
    paused: bool = False
    game_over: int = 0
    now: int = 0
    turn_based: int = Field(default=0, ge=0)
    turn_based_time_out: int = 0
    production_rate: int = 0
    production_counter: int = 0
    tick_rate: int = 0


class Universe(BaseModel):
    """Point-in-time state of one game as reported by the service.

    Instances are frozen: a refresh replaces the whole universe rather than
    editing it. ``raw_data`` keeps the payload exactly as received so the
    snapshot can be persisted and parsed again with :meth:`parse`.
    """

    model_config = ConfigDict(frozen=True)

    game_id: str = Field(..., min_length=1)
    is_real: bool = True

    name: str
    player_id: int

    started: bool = False
    start_time: int = -1
    paused: bool = False
    game_over: int = 0
    now: int = 0

    turn_based: int = Field(default=0, ge=0)
    turn_based_time_out: int = 0

    production_rate: int = 0
    production_counter: int = 0

    tick: int = Field(default=0, ge=0)
    tick_rate: int = 0

    stars: Mapping[int, Star] = Field(default_factory=dict)
    fleets: Mapping[int, Fleet] = Field(default_factory=dict)

    raw_data: dict[str, Any] = Field(default_factory=dict, repr=False)

    @field_validator("name")
    @classmethod
    def _decode_name(cls, value: str) -> str:
        return html.unescape(value)

    @classmethod
    def parse(cls, game_id: str, raw: Any) -> Self:
        """Build a universe for *game_id* from a raw service payload."""
        if not isinstance(raw, Mapping):
            msg = (
                f"Universe payload for game {game_id} must be an object, "
                f"got {type(raw).__name__}."
            )
            raise MalformedSnapshotError(msg)
        try:
            report = _UniverseReport.model_validate(raw)
        except ValidationError as exc:
            msg = f"Malformed universe payload for game {game_id}: {exc}"
            raise MalformedSnapshotError(msg) from exc

        return cls(
            game_id=game_id,
            is_real=True,
            name=report.name,
            player_id=report.player_uid,
            started=report.started,
            start_time=report.start_time,
            paused=report.paused,
            game_over=report.game_over,
            now=report.now,
            turn_based=report.turn_based,
            turn_based_time_out=report.turn_based_time_out,
            production_rate=report.production_rate,
            production_counter=report.production_counter,
            tick=report.tick,
            tick_rate=report.tick_rate,
            stars={star.id: star for star in report.stars.values()},
            fleets={fleet.id: fleet for fleet in report.fleets.values()},
            raw_data=copy.deepcopy(dict(raw)),
        )

    @classmethod
    def placeholder(cls) -> Self:
        """Return the sentinel universe standing in for "no data yet"."""
        return cls(
            game_id=EMPTY_UNIVERSE_ID,
            is_real=False,
            name=EMPTY_UNIVERSE_DATA["name"],
            player_id=EMPTY_UNIVERSE_DATA["player_uid"],
            raw_data=copy.deepcopy(EMPTY_UNIVERSE_DATA),
        )

    def is_same_game(self, other: Universe) -> bool:
        """Compare game identity only, ignoring the tick."""
        return self.game_id == other.game_id

    def star_list(self) -> list[Star]:
        return list(self.stars.values())

    def get_star(self, star_id: int) -> Star | None:
        return self.stars.get(star_id)

    def get_star_by_name(self, name: str | None) -> Star | None:
        """Find a star by its decoded name, ignoring case."""
        wanted = (name or "").lower()
        return next(
            (star for star in self.stars.values() if star.name.lower() == wanted),
            None,
        )

    def stars_owned_by(self, player_id: int) -> list[Star]:
        return [star for star in self.stars.values() if star.owner_id == player_id]

    def own_stars(self) -> list[Star]:
        """Stars owned by the authenticated account."""
        return self.stars_owned_by(self.player_id)

    def fleet_list(self) -> list[Fleet]:
        return list(self.fleets.values())

    def get_fleet(self, fleet_id: int) -> Fleet | None:
        return self.fleets.get(fleet_id)

    def fleets_at_star(self, star: Star, player_id: int | None = None) -> list[Fleet]:
        """Fleets orbiting *star*, optionally restricted to one owner."""
        fleets = [fleet for fleet in self.fleets.values() if fleet.is_at(star)]
        if player_id is not None:
            return [fleet for fleet in fleets if fleet.owner_id == player_id]
        return fleets

    def total_ships_at(self, star: Star, player_id: int | None = None) -> int:
        """Return the garrison (when owned) plus every orbiting fleet's ships.

        The garrison counts when *star* belongs to *player_id*, or to the
        account itself when no player is given. Fleets are filtered to
        *player_id* only when it is passed explicitly.
        """
        owner = self.player_id if player_id is None else player_id
        garrison = star.ships if star.owner_id == owner else 0
        fleet_ships = sum(fleet.ships for fleet in self.fleets_at_star(star, player_id))
        return garrison + fleet_ships

    def describe(self) -> str:
        """One-line summary used in log output."""
        kind = f"turn based ({self.turn_based})" if self.turn_based else "real time"
        label = "" if self.is_real else " [placeholder]"
        return (
            f"{self.name!r} game={self.game_id} tick={self.tick} {kind}, "
            f"{len(self.stars)} stars, {len(self.fleets)} fleets{label}"
        )


__all__ = ["EMPTY_UNIVERSE_DATA", "EMPTY_UNIVERSE_ID", "Universe"]
