"""Realtime store port for the application layer.

The store is an external key-tree service addressed by '/'-separated paths.
Infrastructure adapters (Firebase Realtime Database REST, in-memory tree)
implement this protocol; caches depend only on it (DIP).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

SnapshotCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class SubscriptionError(Exception):
    """A live subscription was refused or cancelled by the store."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Subscription to {path!r} failed: {reason}")


class IRealtimeStore(Protocol):
    """Protocol for the realtime key-tree store.

    Snapshot callbacks receive the full value at the subscribed path (None
    when absent) and run synchronously on the event loop. Write failures
    raise StoreWriteException; subscription failures go to on_error.
    """

    async def subscribe(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        """Start delivering snapshots of path; return a callable that stops them."""

    async def write_full(self, path: str, value: Any) -> None:
        """Replace the value at path (None deletes it)."""

    def generate_child_key(self, path: str) -> str:
        """Return a new unique, time-ordered child key for path (no I/O)."""

    async def delete(self, path: str) -> None:
        """Remove the node at path. Idempotent if already missing."""

    async def read(self, path: str) -> Any:
        """Return the current value at path once (None when absent)."""
