"""Account profile returned by the ``init_player`` request."""

from __future__ import annotations

import html
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict

INIT_PLAYER_TAG = "meta_init_player"
# Both spellings of the tag are in use.
INIT_PLAYER_TAGS = (INIT_PLAYER_TAG, "meta:init_player")


class OpenGame(BaseModel):
    """One game the account currently participates in."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    number: str = Field(..., min_length=1, description="Game id used by orders.")
    name: str = ""
    status: str = "active"
    turn_based: int = Field(default=0, ge=0)
    players: int = 0
    max_players: int = Field(default=0, alias="maxPlayers")
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def _lift_description(cls, data: Any) -> Any:
        """Flatten ``config.description`` into :attr:`description`."""
        if isinstance(data, dict) and "description" not in data:
            config = data.get("config")
            if isinstance(config, dict) and "description" in config:
                return {**data, "description": config["description"]}
        return data

    @field_validator("number", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("name", "description")
    @classmethod
    def _decode_text(cls, value: str) -> str:
        return html.unescape(value)

    @property
    def game_id(self) -> str:
        return self.number


class PlayerProfile(BaseModel):
    """Summary of the authenticated account and its open games."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    games_in: int = Field(default=0, ge=0)
    user_id: str = ""
    alias: str = ""
    open_games: tuple[OpenGame, ...] = Field(default_factory=tuple)

    @field_validator("user_id", mode="before")
    @classmethod
    def _coerce_user_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    def game_ids(self) -> list[str]:
        """Return the ids of every open game in listing order."""
        return [game.number for game in self.open_games]


__all__ = ["INIT_PLAYER_TAG", "INIT_PLAYER_TAGS", "OpenGame", "PlayerProfile"]
