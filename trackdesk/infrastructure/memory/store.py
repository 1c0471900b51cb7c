"""In-process realtime store over a nested dict.

Implements IRealtimeStore with the same value rules as the Realtime Database
(None members dropped, empty objects pruned, forbidden keys rejected).
Snapshots are delivered synchronously to every subscriber whose path is the
written path, one of its ancestors, or one of its descendants. Used when
STORE_BACKEND=memory and in tests.
"""

from __future__ import annotations

import copy
import itertools
import logging
from typing import Any

from trackdesk.application.interfaces import (
    ErrorCallback,
    SnapshotCallback,
    SubscriptionError,
    Unsubscribe,
)
from trackdesk.domain.exceptions import StoreWriteException
from trackdesk.infrastructure.firebase._rest_encoding import (
    apply_put,
    split_path,
    to_store_value,
)
from trackdesk.shared.utils.generators import generate_push_key

logger = logging.getLogger(__name__)


class InMemoryRealtimeStore:
    """Realtime store kept in memory; synchronous snapshot delivery.

    fail_writes and fail_subscriptions simulate a store that rejects writes
    or refuses listeners.
    """

    def __init__(self, initial: Any = None) -> None:
        self._root: Any = to_store_value(initial) if initial is not None else None
        self._subscribers: dict[int, tuple[list[str], SnapshotCallback, ErrorCallback]] = {}
        self._ids = itertools.count(1)
        self.fail_writes = False
        self.fail_subscriptions = False
        self.subscribe_calls: list[str] = []
        self.writes: list[tuple[str, Any]] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _get(self, segments: list[str]) -> Any:
        node = self._root
        for segment in segments:
            if isinstance(node, dict):
                node = node.get(segment)
            elif isinstance(node, list) and segment.isdigit() and int(segment) < len(node):
                node = node[int(segment)]
            else:
                return None
        return node

    async def subscribe(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        self.subscribe_calls.append(path)
        if self.fail_subscriptions:
            on_error(SubscriptionError(path, "permission denied"))
            return lambda: None
        segments = split_path(path)
        sub_id = next(self._ids)
        self._subscribers[sub_id] = (segments, on_snapshot, on_error)
        on_snapshot(copy.deepcopy(self._get(segments)))

        def unsubscribe() -> None:
            self._subscribers.pop(sub_id, None)

        return unsubscribe

    async def write_full(self, path: str, value: Any) -> None:
        if self.fail_writes:
            raise StoreWriteException(path, "Store rejected the write (permission denied)")
        stored = to_store_value(value) if value is not None else None
        self._root = apply_put(self._root, path, copy.deepcopy(stored))
        self.writes.append((path, copy.deepcopy(stored)))
        self._notify(split_path(path))

    async def delete(self, path: str) -> None:
        await self.write_full(path, None)

    def generate_child_key(self, path: str) -> str:
        return generate_push_key()

    async def read(self, path: str) -> Any:
        return copy.deepcopy(self._get(split_path(path)))

    def _notify(self, written: list[str]) -> None:
        for segments, on_snapshot, _ in list(self._subscribers.values()):
            depth = min(len(segments), len(written))
            if segments[:depth] == written[:depth]:
                on_snapshot(copy.deepcopy(self._get(segments)))
