"""Persistence adapters for the last known universe of each game.

Stores deal in raw payloads, exactly as the service sent them, so a cached
snapshot goes back through :meth:`Universe.parse` like a live response. The
game engine decides when to consult the cache; stores only read and write.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from pathlib import Path
from typing import Any, Protocol

from pride_sync.shared.errors import SnapshotStoreError

logger = logging.getLogger(__name__)

RawSnapshot = dict[str, Any]


class SnapshotStore(Protocol):
    """Protocol describing how raw universe payloads are persisted."""

    async def save_snapshot(self, game_id: str, raw: RawSnapshot) -> None:
        """Persist *raw* for *game_id*, replacing any previous value."""

    async def load_snapshot(self, game_id: str) -> RawSnapshot | None:
        """Return the stored payload for *game_id* or ``None``."""


class InMemorySnapshotStore:
    """Trivial in-memory implementation of :class:`SnapshotStore`."""

    def __init__(self) -> None:
        self._snapshots: dict[str, RawSnapshot] = {}

    async def save_snapshot(self, game_id: str, raw: RawSnapshot) -> None:
        """Store a copy of *raw* keyed by *game_id*."""
        self._snapshots[game_id] = copy.deepcopy(raw)

    async def load_snapshot(self, game_id: str) -> RawSnapshot | None:
        """Return a copy of the stored payload for *game_id* if available."""
        raw = self._snapshots.get(game_id)
        return copy.deepcopy(raw) if raw is not None else None

    def __contains__(self, game_id: object) -> bool:
        return game_id in self._snapshots


class FileSnapshotStore:
    """Keep one pretty-printed JSON file per game under *directory*."""

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, game_id: str) -> Path:
        """Return the cache file used for *game_id*."""
        return self._directory / f"{game_id}.json"

    async def save_snapshot(self, game_id: str, raw: RawSnapshot) -> None:
        """Write *raw* to the cache file of *game_id*."""
        path = self.path_for(game_id)
        logger.debug("Saving universe for game %s to %s", game_id, path)
        try:
            await asyncio.to_thread(self._write, path, raw)
        except (OSError, TypeError, ValueError) as exc:
            msg = f"Could not save universe for game {game_id} to {path}: {exc}"
            raise SnapshotStoreError(msg) from exc

    async def load_snapshot(self, game_id: str) -> RawSnapshot | None:
        """Read the cache file of *game_id*; ``None`` when there is none."""
        path = self.path_for(game_id)
        logger.debug("Loading universe for game %s from %s", game_id, path)
        try:
            return await asyncio.to_thread(self._read, path)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            msg = f"Could not load universe for game {game_id} from {path}: {exc}"
            raise SnapshotStoreError(msg) from exc

    @staticmethod
    def _write(path: Path, raw: RawSnapshot) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(raw, indent=2), encoding="utf-8")

    @staticmethod
    def _read(path: Path) -> RawSnapshot:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            msg = f"Expected a JSON object in {path}."
            raise ValueError(msg)
        return data


__all__ = [
    "FileSnapshotStore",
    "InMemorySnapshotStore",
    "RawSnapshot",
    "SnapshotStore",
]
