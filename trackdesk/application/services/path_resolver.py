"""Resolves a logical collection to the store partition a caller may use."""

from __future__ import annotations

from collections.abc import Iterable

from trackdesk.core.config import get_settings
from trackdesk.core.constants import (
    DATA_ROOT,
    EMPLOYEE_COLLECTION,
    FORBIDDEN_KEY_CHARS,
    PATH_SEP,
)
from trackdesk.domain.enums import Role
from trackdesk.domain.exceptions import ValidationException
from trackdesk.domain.value_objects import Identity


class PathResolver:
    """Map (collection, identity) to a partition path.

    - Admin, shared collection: data/{shared_admin_id}/{collection}, the same
      for every admin.
    - Admin, other collection: data/{subject_id}/{collection}.
    - Employee: only notifications, in data/{subject_id}/notifications.
    - Anything else (including no identity): None. Callers treat None as an
      empty read and refuse writes.
    """

    def __init__(
        self,
        shared_admin_id: str,
        shared_collections: Iterable[str],
        root: str = DATA_ROOT,
    ) -> None:
        if not shared_admin_id or PATH_SEP in shared_admin_id:
            raise ValueError("shared_admin_id must be a single path segment")
        self._shared_admin_id = shared_admin_id
        self._shared_collections = frozenset(shared_collections)
        self._root = root.strip(PATH_SEP)

    @classmethod
    def from_settings(cls) -> PathResolver:
        settings = get_settings()
        return cls(settings.shared_admin_id, settings.shared_collections)

    @property
    def shared_collections(self) -> frozenset[str]:
        return self._shared_collections

    def is_shared(self, collection: str) -> bool:
        """Return True if admins share one partition for collection."""
        return collection in self._shared_collections

    def resolve(self, collection: str, identity: Identity | None) -> str | None:
        """Return the partition path for collection, or None if not accessible.

        Raises:
            ValidationException: If collection is not a valid path segment.
        """
        _validate_collection(collection)
        if identity is None:
            return None
        if identity.role == Role.ADMIN:
            owner = (
                self._shared_admin_id
                if collection in self._shared_collections
                else identity.subject_id
            )
            return self._join(owner, collection)
        if identity.role == Role.EMPLOYEE and collection == EMPLOYEE_COLLECTION:
            return self._join(identity.subject_id, collection)
        return None

    def _join(self, owner: str, collection: str) -> str:
        return PATH_SEP.join((self._root, owner, collection))


def _validate_collection(collection: str) -> None:
    if not collection or not isinstance(collection, str):
        raise ValidationException("Collection name must be a non-empty string", field="collection")
    if any(ch in FORBIDDEN_KEY_CHARS for ch in collection):
        raise ValidationException(
            f"Collection name must not contain any of {FORBIDDEN_KEY_CHARS!r}",
            field="collection",
        )
