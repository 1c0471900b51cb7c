"""Entries of admin-defined custom forms, stored field-encrypted.

An entry is {"formId": ..., "data": {...}} in the shared 'formEntries'
partition. Before writing, data keys are sanitized for the store and every
string leaf is enveloped; on read the leaves are decrypted again. Attachment
urls stay in clear.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from trackdesk.application.services.envelope_codec import EnvelopeCodec
from trackdesk.application.services.live_collection import LiveCollection
from trackdesk.application.services.sync_registry import SyncRegistry
from trackdesk.core.constants import (
    COLLECTION_CUSTOM_FORMS,
    COLLECTION_FORM_ENTRIES,
    ID_FIELD,
    KEY_SUBSTITUTE,
)
from trackdesk.domain.enums import FormFieldType
from trackdesk.domain.exceptions import (
    NotAuthenticatedException,
    ResourceNotFoundException,
    ValidationException,
)
from trackdesk.domain.value_objects import Identity
from trackdesk.shared.telemetry import traced
from trackdesk.shared.utils.sanitization import sanitize_deep

logger = logging.getLogger(__name__)

FORM_ID_FIELD = "formId"
DATA_FIELD = "data"


def check_required_fields(fields: list[dict[str, Any]], data: dict[str, Any]) -> None:
    """Ensure every required, non-boolean field of a form has a value.

    Field values live under data[name]["value"]; group fields recurse into
    their own 'fields' with data[name]["value"] as the nested data. Fields
    are required unless they carry "required": false.

    Raises:
        ValidationException: Naming the first missing field.
    """
    for field in fields or []:
        name = field.get("name")
        field_type = field.get("type")
        entry = data.get(name) if isinstance(data, dict) else None
        value = entry.get("value") if isinstance(entry, dict) else None
        if field_type == FormFieldType.GROUP.value and field.get("fields"):
            check_required_fields(field["fields"], value or {})
        elif field_type != FormFieldType.BOOLEAN.value and field.get("required", True):
            if value is None or value == "":
                raise ValidationException(f'Field "{name}" is required.', field=name)


class FormEntryService:
    """Add, list, update and delete encrypted custom-form entries."""

    def __init__(
        self,
        registry: SyncRegistry,
        codec: EnvelopeCodec,
        *,
        key_substitute: str = KEY_SUBSTITUTE,
        snapshot_timeout: float | None = None,
    ) -> None:
        self._registry = registry
        self._codec = codec
        self._key_substitute = key_substitute
        self._snapshot_timeout = snapshot_timeout

    @asynccontextmanager
    async def _loaded(self, name: str, identity: Identity | None) -> AsyncIterator[LiveCollection]:
        async with self._registry.collection(name, identity) as cache:
            try:
                await cache.wait_loaded(self._snapshot_timeout)
            except TimeoutError:
                logger.warning("No snapshot of %s yet; using the current mirror", cache.path)
            yield cache

    @staticmethod
    def _require_identity(identity: Identity | None) -> Identity:
        if identity is None:
            raise NotAuthenticatedException()
        return identity

    @staticmethod
    def _form(forms: LiveCollection, form_id: str) -> dict[str, Any]:
        form = forms.get(form_id)
        if form is None:
            raise ResourceNotFoundException("form", form_id)
        return form

    @staticmethod
    def _entry(entries: LiveCollection, form_id: str, entry_id: str) -> dict[str, Any]:
        current = entries.get(entry_id)
        if current is None or current.get(FORM_ID_FIELD) != form_id:
            raise ResourceNotFoundException("entry", entry_id)
        return current

    def _encode(self, data: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(data, dict):
            raise ValidationException("Entry data must be an object", field=DATA_FIELD)
        return self._codec.encrypt_deep(sanitize_deep(data, substitute=self._key_substitute))

    def _decode(self, entry: dict[str, Any]) -> dict[str, Any]:
        return {
            ID_FIELD: entry[ID_FIELD],
            FORM_ID_FIELD: entry.get(FORM_ID_FIELD),
            DATA_FIELD: self._codec.decrypt_deep(entry.get(DATA_FIELD) or {}),
        }

    @traced("form_entries.list")
    async def list_entries(self, form_id: str, identity: Identity | None) -> list[dict[str, Any]]:
        """Return the decrypted entries of form_id, oldest first."""
        async with self._loaded(COLLECTION_FORM_ENTRIES, identity) as entries:
            return [
                self._decode(entry)
                for entry in entries.data
                if entry.get(FORM_ID_FIELD) == form_id
            ]

    @traced("form_entries.add")
    async def add_entry(
        self, form_id: str, data: dict[str, Any], identity: Identity | None
    ) -> str:
        """Validate, sanitize and encrypt data, then store it as a new entry.

        Returns:
            The new entry id.

        Raises:
            NotAuthenticatedException: Without a signed-in identity.
        """
        self._require_identity(identity)
        async with self._loaded(COLLECTION_CUSTOM_FORMS, identity) as forms:
            form = self._form(forms, form_id)
        check_required_fields(form.get("fields") or [], data)
        async with self._registry.collection(COLLECTION_FORM_ENTRIES, identity) as entries:
            entry_id = await entries.add(
                {FORM_ID_FIELD: form_id, DATA_FIELD: self._encode(data)}
            )
        logger.info("Added entry %s to form %s", entry_id, form_id)
        return entry_id

    @traced("form_entries.update")
    async def update_entry(
        self,
        form_id: str,
        entry_id: str,
        data: dict[str, Any],
        identity: Identity | None,
    ) -> None:
        self._require_identity(identity)
        async with self._loaded(COLLECTION_CUSTOM_FORMS, identity) as forms:
            form = self._form(forms, form_id)
        async with self._loaded(COLLECTION_FORM_ENTRIES, identity) as entries:
            self._entry(entries, form_id, entry_id)
            check_required_fields(form.get("fields") or [], data)
            await entries.update(entry_id, {DATA_FIELD: self._encode(data)})

    @traced("form_entries.delete")
    async def delete_entry(self, form_id: str, entry_id: str, identity: Identity | None) -> None:
        self._require_identity(identity)
        async with self._loaded(COLLECTION_FORM_ENTRIES, identity) as entries:
            self._entry(entries, form_id, entry_id)
            await entries.remove_by_id(entry_id)

    @traced("form_entries.delete_form")
    async def delete_form(self, form_id: str, identity: Identity | None) -> int:
        """Delete a custom form and all of its entries.

        Returns:
            Number of entries removed.
        """
        self._require_identity(identity)
        async with (
            self._loaded(COLLECTION_CUSTOM_FORMS, identity) as forms,
            self._loaded(COLLECTION_FORM_ENTRIES, identity) as entries,
        ):
            self._form(forms, form_id)
            entry_ids = [
                entry[ID_FIELD] for entry in entries.data if entry.get(FORM_ID_FIELD) == form_id
            ]
            await asyncio.gather(*(entries.remove_by_id(entry_id) for entry_id in entry_ids))
            await forms.remove_by_id(form_id)
        logger.info("Deleted form %s and %d entries", form_id, len(entry_ids))
        return len(entry_ids)
