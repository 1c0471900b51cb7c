"""Registry of live caches shared per partition path.

Every caller that resolves to the same partition (e.g. all admins on
'tickets') shares one subscription. A cache is opened on first acquisition
and counts its users; when the last one releases it, the cache is closed and
evicted, either at once or after ``idle_timeout`` seconds without a new user.
An open WebSocket watcher holds an acquisition for as long as it is connected.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from trackdesk.application.interfaces import IRealtimeStore
from trackdesk.application.services.live_base import LiveCache
from trackdesk.application.services.live_collection import LiveCollection
from trackdesk.application.services.live_object import LiveObject
from trackdesk.application.services.path_resolver import PathResolver
from trackdesk.domain.value_objects import Identity

logger = logging.getLogger(__name__)

# (path, message) -> awaitable; wired to ConnectionManager.broadcast_to_partition.
Broadcaster = Callable[[str, dict[str, Any]], Awaitable[None]]


class _Lease:
    __slots__ = ("cache", "users", "expiry")

    def __init__(self, cache: LiveCache) -> None:
        self.cache = cache
        self.users = 0
        self.expiry: asyncio.TimerHandle | None = None


class SyncRegistry:
    """Open, share and close LiveCollection / LiveObject instances by path."""

    def __init__(
        self,
        store: IRealtimeStore,
        resolver: PathResolver,
        broadcaster: Broadcaster | None = None,
        *,
        idle_timeout: float = 0.0,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._broadcaster = broadcaster
        self._idle_timeout = idle_timeout
        self._collections: dict[str, _Lease] = {}
        self._objects: dict[str, _Lease] = {}
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task] = set()

    @property
    def store(self) -> IRealtimeStore:
        return self._store

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    async def acquire_collection(self, name: str, identity: Identity | None) -> LiveCollection:
        """Return the open cache for the caller's partition of collection.

        Callers without a partition get a private, empty cache that never
        touches the store. Every acquisition must be paired with release().
        """

        def build() -> LiveCollection:
            return LiveCollection(self._store, self._resolver, name, identity)

        def message(data: Any) -> dict[str, Any]:
            return {"type": "snapshot", "collection": name, "data": data}

        return await self._acquire(self._collections, name, identity, build, message)

    async def acquire_object(
        self, name: str, identity: Identity | None, initial: Any = None
    ) -> LiveObject:
        """Return the open cache for the caller's partition of object name."""

        def build() -> LiveObject:
            return LiveObject(self._store, self._resolver, name, identity, initial)

        def message(value: Any) -> dict[str, Any]:
            return {"type": "snapshot", "object": name, "value": value}

        return await self._acquire(self._objects, name, identity, build, message)

    async def release(self, cache: LiveCache) -> None:
        """Drop one use of cache; the last release closes its subscription."""
        table = self._objects if isinstance(cache, LiveObject) else self._collections
        async with self._lock:
            lease = table.get(cache.path) if cache.path is not None else None
            if lease is None or lease.cache is not cache:
                cache.close()
                return
            lease.users -= 1
            if lease.users > 0:
                return
            if self._idle_timeout > 0:
                lease.expiry = asyncio.get_running_loop().call_later(
                    self._idle_timeout, self._expire, table, cache.path, lease
                )
            else:
                self._evict(table, cache.path, lease)

    @asynccontextmanager
    async def collection(
        self, name: str, identity: Identity | None
    ) -> AsyncIterator[LiveCollection]:
        cache = await self.acquire_collection(name, identity)
        try:
            yield cache
        finally:
            await self.release(cache)

    @asynccontextmanager
    async def object(
        self, name: str, identity: Identity | None, initial: Any = None
    ) -> AsyncIterator[LiveObject]:
        cache = await self.acquire_object(name, identity, initial)
        try:
            yield cache
        finally:
            await self.release(cache)

    def open_paths(self) -> list[str]:
        return [*self._collections, *self._objects]

    def users(self, path: str) -> int:
        """Number of outstanding acquisitions of the cache at path."""
        lease = self._collections.get(path) or self._objects.get(path)
        return lease.users if lease is not None else 0

    async def close_all(self) -> None:
        """Close every cache and wait for queued broadcasts."""
        async with self._lock:
            leases = [*self._collections.values(), *self._objects.values()]
            self._collections.clear()
            self._objects.clear()
        for lease in leases:
            if lease.expiry is not None:
                lease.expiry.cancel()
            lease.cache.close()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        logger.info("Closed %d live caches", len(leases))

    async def _acquire(
        self,
        table: dict[str, _Lease],
        name: str,
        identity: Identity | None,
        build: Callable[[], LiveCache],
        message: Callable[[Any], dict[str, Any]],
    ) -> Any:
        path = self._resolver.resolve(name, identity)
        if path is None:
            cache = build()
            await cache.open()
            return cache
        async with self._lock:
            lease = table.get(path)
            if lease is None:
                cache = build()
                cache.on_change(lambda state: self._publish(path, message(state)))
                await cache.open()
                lease = table[path] = _Lease(cache)
                logger.info("Opened live cache %s", path)
            elif lease.expiry is not None:
                lease.expiry.cancel()
                lease.expiry = None
            lease.users += 1
            return lease.cache

    def _expire(self, table: dict[str, _Lease], path: str, lease: _Lease) -> None:
        if table.get(path) is lease and lease.users == 0:
            self._evict(table, path, lease)

    @staticmethod
    def _evict(table: dict[str, _Lease], path: str, lease: _Lease) -> None:
        del table[path]
        lease.expiry = None
        lease.cache.close()
        logger.info("Released live cache %s", path)

    def _publish(self, path: str, message: dict[str, Any]) -> None:
        if self._broadcaster is None:
            return
        task = asyncio.get_running_loop().create_task(self._broadcaster(path, message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
