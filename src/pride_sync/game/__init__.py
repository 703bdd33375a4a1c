"""Per-game synchronization: order queue, state engine, refresh timer and cache."""

from pride_sync.game.diagnostics import DiagnosticSink, UniverseDumpSink
from pride_sync.game.engine import Game, plan_fleet_split
from pride_sync.game.persistence import (
    FileSnapshotStore,
    InMemorySnapshotStore,
    RawSnapshot,
    SnapshotStore,
)
from pride_sync.game.queue import DEFAULT_ORDER_DELAY_SECONDS, OrderQueue
from pride_sync.game.scheduler import (
    DEFAULT_REFRESH_INTERVAL_SECONDS,
    RefreshScheduler,
)

__all__ = [
    "DEFAULT_ORDER_DELAY_SECONDS",
    "DEFAULT_REFRESH_INTERVAL_SECONDS",
    "DiagnosticSink",
    "FileSnapshotStore",
    "Game",
    "InMemorySnapshotStore",
    "OrderQueue",
    "RawSnapshot",
    "RefreshScheduler",
    "SnapshotStore",
    "UniverseDumpSink",
    "plan_fleet_split",
]
