"""Error taxonomy shared by the client, the snapshot model and the engine."""

from __future__ import annotations

from typing import Any


class PrideSyncError(Exception):
    """Base class for every error raised by the package."""


class AuthenticationError(PrideSyncError):
    """Raised when no session token could be obtained or none is available."""


class TransportError(PrideSyncError):
    """Raised when a request fails before a usable response arrives."""


class UnexpectedResponseError(PrideSyncError):
    """Raised when the service answers with an unrecognized payload."""

    def __init__(self, message: str, response: Any = None) -> None:
        super().__init__(message)
        self.response = response


class MalformedSnapshotError(PrideSyncError):
    """Raised when a universe payload is missing fields or has the wrong shape."""


class SnapshotStoreError(PrideSyncError):
    """Raised when a persisted snapshot exists but cannot be read or written."""


__all__ = [
    "AuthenticationError",
    "MalformedSnapshotError",
    "PrideSyncError",
    "SnapshotStoreError",
    "TransportError",
    "UnexpectedResponseError",
]
