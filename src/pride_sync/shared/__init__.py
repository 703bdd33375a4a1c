"""Cross-cutting errors and event primitives shared across the package."""

from pride_sync.shared.errors import (
    AuthenticationError,
    MalformedSnapshotError,
    PrideSyncError,
    SnapshotStoreError,
    TransportError,
    UnexpectedResponseError,
)
from pride_sync.shared.events import EventBus, GameEvent, Listener

__all__ = [
    "AuthenticationError",
    "EventBus",
    "GameEvent",
    "Listener",
    "MalformedSnapshotError",
    "PrideSyncError",
    "SnapshotStoreError",
    "TransportError",
    "UnexpectedResponseError",
]
