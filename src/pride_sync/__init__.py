"""Pride sync: keeps remote strategy games mirrored locally and orders serialized."""

from pride_sync.account import Account
from pride_sync.client import OrderGateway, OrderResult, SessionClient
from pride_sync.game import (
    FileSnapshotStore,
    Game,
    InMemorySnapshotStore,
    OrderQueue,
    RefreshScheduler,
    UniverseDumpSink,
)
from pride_sync.main import run
from pride_sync.settings import ClientSettings, get_settings
from pride_sync.shared import (
    AuthenticationError,
    EventBus,
    GameEvent,
    MalformedSnapshotError,
    PrideSyncError,
    SnapshotStoreError,
    TransportError,
    UnexpectedResponseError,
)
from pride_sync.universe import Fleet, PlayerProfile, Star, Universe

main = run

__all__ = [
    "Account",
    "AuthenticationError",
    "ClientSettings",
    "EventBus",
    "FileSnapshotStore",
    "Fleet",
    "Game",
    "GameEvent",
    "InMemorySnapshotStore",
    "MalformedSnapshotError",
    "OrderGateway",
    "OrderQueue",
    "OrderResult",
    "PlayerProfile",
    "PrideSyncError",
    "RefreshScheduler",
    "SessionClient",
    "SnapshotStoreError",
    "Star",
    "TransportError",
    "UnexpectedResponseError",
    "Universe",
    "UniverseDumpSink",
    "get_settings",
    "main",
    "run",
]
