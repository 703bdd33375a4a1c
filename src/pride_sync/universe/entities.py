"""Map entities reported inside a universe payload."""

from __future__ import annotations

import html

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

UNOWNED = -1


class Entity(BaseModel):
    """Common identity shared by every object placed on the map.

    Wire payloads use terse keys (``uid``, ``puid``, ``n``); the model exposes
    readable names and accepts either spelling. Names arrive HTML-escaped and
    are decoded once here so callers never see ``&amp;`` style sequences.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int = Field(..., alias="uid")
    owner_id: int = Field(default=UNOWNED, alias="puid")
    name: str = Field(default="", alias="n")

    @field_validator("name")
    @classmethod
    def _decode_name(cls, value: str) -> str:
        return html.unescape(value)

    @property
    def is_owned(self) -> bool:
        """Whether some player controls the entity."""
        return self.owner_id != UNOWNED


class Star(Entity):
    """Star system with its stationed garrison."""

    ships: int = Field(default=0, ge=0, alias="st")


class Fleet(Entity):
    """Carrier holding ships, possibly orbiting a star."""

    ships: int = Field(default=0, ge=0, alias="st")
    orbiting_star_id: int | None = Field(default=None, alias="ouid")

    def is_at(self, star: Star) -> bool:
        """Return True when the fleet currently orbits *star*."""
        return self.orbiting_star_id == star.id


__all__ = ["UNOWNED", "Entity", "Fleet", "Star"]
