"""Subscription lifecycle shared by the live collection and object caches."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from trackdesk.application.interfaces import IRealtimeStore, Unsubscribe
from trackdesk.application.services.path_resolver import PathResolver
from trackdesk.core.constants import FORBIDDEN_KEY_CHARS
from trackdesk.domain.exceptions import (
    NotAuthenticatedException,
    PartitionUnavailableException,
    ValidationException,
)
from trackdesk.domain.value_objects import Identity

logger = logging.getLogger(__name__)

T = TypeVar("T")
ChangeListener = Callable[[T], None]


class LiveCache(ABC, Generic[T]):
    """Mirror of one store partition, kept current by a live subscription.

    The mirrored state is only ever replaced by the snapshot callback. Reads
    never raise: an unresolvable partition or a failed subscription leaves
    the empty state with loading False. Writes go straight to the store and
    show up locally once the subscription echoes them.
    """

    def __init__(
        self,
        store: IRealtimeStore,
        resolver: PathResolver,
        collection: str,
        identity: Identity | None,
        *,
        auth_loading: bool = False,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._collection = collection
        self._identity = identity
        self._auth_loading = auth_loading
        self._path = resolver.resolve(collection, identity)
        self._loaded = asyncio.Event()
        self._loading = auth_loading or self._path is not None
        if not self._loading:
            self._loaded.set()
        self._unsubscribe: Unsubscribe | None = None
        self._generation = 0
        self._listeners: list[ChangeListener[T]] = []

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def path(self) -> str | None:
        """Resolved partition path, or None when the caller has no access."""
        return self._path

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    @abstractmethod
    def _apply_snapshot(self, value: Any) -> None:
        """Replace the mirrored state from a raw snapshot."""

    @abstractmethod
    def _reset(self) -> None:
        """Restore the empty state."""

    @abstractmethod
    def _current(self) -> T:
        """Return a copy of the mirrored state for listeners."""

    async def open(self) -> None:
        """Start mirroring the partition.

        Does nothing while auth is still loading. Without a resolvable path
        the cache settles on the empty state and the store is not contacted.
        """
        if self._unsubscribe is not None or self._auth_loading:
            return
        if self._path is None:
            self._settle_empty()
            return

        self._loading = True
        generation = self._generation
        path = self._path
        unsubscribe = await self._store.subscribe(
            path,
            lambda value: self._on_snapshot(generation, value),
            lambda exc: self._on_error(generation, exc),
        )
        if generation != self._generation:
            # Closed or rebound while the subscription was being registered.
            unsubscribe()
            return
        self._unsubscribe = unsubscribe
        logger.debug("Subscribed to %s", path)

    def close(self) -> None:
        """Release the subscription. Late snapshots are ignored."""
        self._generation += 1
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()
            logger.debug("Unsubscribed from %s", self._path)

    async def rebind(self, identity: Identity | None, auth_loading: bool = False) -> None:
        """Switch to a new identity, resubscribing if the partition changed."""
        new_path = self._resolver.resolve(self._collection, identity)
        self._identity = identity
        was_waiting = self._auth_loading
        self._auth_loading = auth_loading
        if new_path == self._path and self.subscribed and not was_waiting:
            return
        self.close()
        self._path = new_path
        self._reset()
        self._loading = True
        self._loaded = asyncio.Event()
        await self.open()

    def on_change(self, callback: ChangeListener[T]) -> Callable[[], None]:
        """Register callback for every new state; return a remover."""
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    async def wait_loaded(self, timeout: float | None = None) -> T:
        """Wait for the first snapshot (or the empty settle) and return the state.

        Raises:
            TimeoutError: If nothing arrived within timeout seconds.
        """
        await asyncio.wait_for(self._loaded.wait(), timeout)
        return self._current()

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_path(self) -> str:
        if self._identity is None:
            raise NotAuthenticatedException()
        if self._path is None:
            raise PartitionUnavailableException(self._collection, self._identity.role.value)
        return self._path

    def _on_snapshot(self, generation: int, value: Any) -> None:
        if generation != self._generation:
            return
        self._apply_snapshot(value)
        self._mark_loaded()

    def _on_error(self, generation: int, exc: Exception) -> None:
        if generation != self._generation:
            return
        logger.error("Subscription to %s failed: %s", self._path, exc)
        self._settle_empty()

    def _settle_empty(self) -> None:
        self._reset()
        self._mark_loaded()

    def _mark_loaded(self) -> None:
        self._loading = False
        self._loaded.set()
        state = self._current()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Change listener failed for %s", self._path)


def validate_child_id(item_id: str) -> None:
    """Ensure item_id can be used as a single path segment."""
    if not item_id or not isinstance(item_id, str):
        raise ValidationException("Item id must be a non-empty string", field="id")
    if any(ch in FORBIDDEN_KEY_CHARS for ch in item_id):
        raise ValidationException(
            f"Item id must not contain any of {FORBIDDEN_KEY_CHARS!r}", field="id"
        )
