"""Parsed game-state snapshots and the entities they contain."""

from pride_sync.universe.entities import UNOWNED, Entity, Fleet, Star
from pride_sync.universe.player import (
    INIT_PLAYER_TAG,
    INIT_PLAYER_TAGS,
    OpenGame,
    PlayerProfile,
)
from pride_sync.universe.snapshot import (
    EMPTY_UNIVERSE_DATA,
    EMPTY_UNIVERSE_ID,
    Universe,
)

__all__ = [
    "EMPTY_UNIVERSE_DATA",
    "EMPTY_UNIVERSE_ID",
    "INIT_PLAYER_TAG",
    "INIT_PLAYER_TAGS",
    "UNOWNED",
    "Entity",
    "Fleet",
    "OpenGame",
    "PlayerProfile",
    "Star",
    "Universe",
]
