"""Live Collection Cache: an in-memory list mirroring one store partition."""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Generator
from typing import Any

from trackdesk.application.interfaces import IRealtimeStore
from trackdesk.application.services.live_base import LiveCache, validate_child_id
from trackdesk.application.services.path_resolver import PathResolver
from trackdesk.core.constants import ID_FIELD, PATH_SEP
from trackdesk.domain.value_objects import Identity
from trackdesk.shared.utils.ordering import ordered_children

logger = logging.getLogger(__name__)

VALUE_FIELD = "value"


def snapshot_to_records(value: Any) -> list[dict[str, Any]]:
    """Turn a partition snapshot into records, each carrying its key as 'id'.

    Children come out in store order. Object children keep their fields (a
    stored 'id' is replaced by the key); scalar children become
    {"id": key, "value": child}.
    """
    records: list[dict[str, Any]] = []
    for key, child in ordered_children(value):
        if isinstance(child, dict):
            record = {ID_FIELD: key}
            record.update(
                (field, copy.deepcopy(item)) for field, item in child.items() if field != ID_FIELD
            )
        else:
            record = {ID_FIELD: key, VALUE_FIELD: copy.deepcopy(child)}
        records.append(record)
    return records


class PendingWrite:
    """A write already sent to the store whose id is known up front.

    Awaiting it returns the id once the store confirms, or raises the
    store's error. A failure nobody awaits is logged.
    """

    def __init__(self, item_id: str, task: asyncio.Task) -> None:
        self._id = item_id
        self._task = task
        self._awaited = False
        task.add_done_callback(self._log_unawaited_failure)

    @property
    def id(self) -> str:
        return self._id

    def done(self) -> bool:
        return self._task.done()

    def __await__(self) -> Generator[Any, None, str]:
        self._awaited = True
        yield from self._task.__await__()
        return self._id

    def _log_unawaited_failure(self, task: asyncio.Task) -> None:
        if task.cancelled() or self._awaited:
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Write of %s failed: %s", self._id, exc)


class LiveCollection(LiveCache[list[dict[str, Any]]]):
    """Keep a list of records in sync with the caller's partition of a collection.

    Usage:
        async with LiveCollection(store, resolver, "tickets", identity) as tickets:
            await tickets.wait_loaded(5)
            new_id = await tickets.add({"title": "Printer jam"})
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
        super().__init__(store, resolver, collection, identity, auth_loading=auth_loading)
        self._data: list[dict[str, Any]] = []

    @property
    def data(self) -> list[dict[str, Any]]:
        """Copy of the mirrored records, in store order."""
        return copy.deepcopy(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def get(self, item_id: str) -> dict[str, Any] | None:
        """Return a copy of the cached record with item_id, if present."""
        for record in self._data:
            if record.get(ID_FIELD) == item_id:
                return copy.deepcopy(record)
        return None

    def push(self, item: dict[str, Any]) -> PendingWrite:
        """Start writing item under a new push key and return at once.

        The key is generated locally, so PendingWrite.id is usable before the
        store confirms. The record appears in data once the subscription
        echoes it.

        Raises:
            NotAuthenticatedException: No identity.
            PartitionUnavailableException: The role cannot write this collection.
        """
        path = self._require_path()
        key = self._store.generate_child_key(path)
        payload = {field: value for field, value in item.items() if field != ID_FIELD}
        task = asyncio.get_running_loop().create_task(
            self._store.write_full(_child(path, key), payload)
        )
        return PendingWrite(key, task)

    async def add(self, item: dict[str, Any]) -> str:
        """Write item under a new push key and return the key once stored.

        Raises:
            NotAuthenticatedException: No identity.
            PartitionUnavailableException: The role cannot write this collection.
            StoreWriteException: The store rejected the write.
        """
        return await self.push(item)

    async def update(self, item_id: str, partial: dict[str, Any]) -> None:
        """Merge partial over the cached record and overwrite it in the store.

        Fields that exist remotely but not in the local mirror are lost.
        """
        path = self._require_path()
        validate_child_id(item_id)
        current = self.get(item_id)
        if current is None:
            logger.warning(
                "Updating %s/%s which is not in the local mirror; writing partial only",
                path,
                item_id,
            )
            merged = dict(partial)
        else:
            merged = {**current, **partial}
        merged.pop(ID_FIELD, None)
        await self._store.write_full(_child(path, item_id), merged)

    async def remove_by_id(self, item_id: str) -> None:
        path = self._require_path()
        validate_child_id(item_id)
        await self._store.delete(_child(path, item_id))

    def _apply_snapshot(self, value: Any) -> None:
        if value is not None and not isinstance(value, (dict, list)):
            logger.warning("Ignoring scalar snapshot at collection path %s", self._path)
            value = None
        self._data = snapshot_to_records(value)

    def _reset(self) -> None:
        self._data = []

    def _current(self) -> list[dict[str, Any]]:
        return self.data


def _child(path: str, key: str) -> str:
    return f"{path}{PATH_SEP}{key}"
