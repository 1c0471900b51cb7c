"""Live Object Cache: a single value mirrored from one store partition."""

from __future__ import annotations

import copy
from typing import Any

from trackdesk.application.interfaces import IRealtimeStore
from trackdesk.application.services.live_base import LiveCache
from trackdesk.application.services.path_resolver import PathResolver
from trackdesk.domain.value_objects import Identity


class LiveObject(LiveCache[Any]):
    """Keep one value in sync with the store, falling back to initial when absent."""

    def __init__(
        self,
        store: IRealtimeStore,
        resolver: PathResolver,
        name: str,
        identity: Identity | None,
        initial: Any = None,
        *,
        auth_loading: bool = False,
    ) -> None:
        super().__init__(store, resolver, name, identity, auth_loading=auth_loading)
        self._initial = copy.deepcopy(initial)
        self._value = copy.deepcopy(initial)

    @property
    def name(self) -> str:
        return self._collection

    @property
    def value(self) -> Any:
        return copy.deepcopy(self._value)

    async def set(self, value: Any) -> None:
        """Overwrite the whole value at the partition path (no merge).

        Raises:
            NotAuthenticatedException: No identity.
            PartitionUnavailableException: The role cannot write this object.
            StoreWriteException: The store rejected the write.
        """
        path = self._require_path()
        await self._store.write_full(path, value)

    def _apply_snapshot(self, value: Any) -> None:
        self._value = copy.deepcopy(self._initial if value is None else value)

    def _reset(self) -> None:
        self._value = copy.deepcopy(self._initial)

    def _current(self) -> Any:
        return self.value
