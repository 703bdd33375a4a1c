"""Optional sinks that observe every universe a game accepts."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Protocol

from pride_sync.universe import Universe  # noqa: TC001

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[\[\]'\" ?:|<>/\\*]")


class DiagnosticSink(Protocol):
    """Receives each universe right after a game adopts it."""

    async def record(self, universe: Universe) -> None:
        """Inspect or store *universe*."""


class UniverseDumpSink:
    """Write every recorded universe to ``<name>_tick_<tick>.json`` under *directory*."""

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, universe: Universe) -> Path:
        safe_name = _UNSAFE_FILENAME_CHARS.sub("_", universe.name)
        return self._directory / f"{safe_name}_tick_{universe.tick}.json"

    async def record(self, universe: Universe) -> None:
        """Dump the raw payload of *universe*; placeholders are skipped."""
        if not universe.is_real:
            return
        path = self.path_for(universe)
        logger.debug("Dumping universe %s to %s", universe.describe(), path)
        try:
            await asyncio.to_thread(self._write, path, universe.raw_data)
        except OSError:
            logger.warning("Could not dump universe to %s", path, exc_info=True)

    @staticmethod
    def _write(path: Path, raw: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(raw, indent=2), encoding="utf-8")


__all__ = ["DiagnosticSink", "UniverseDumpSink"]
