"""Collections API: read, add, update and remove records of the caller's partition."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Response

from trackdesk.api.v1.dependencies import get_identity_optional, get_sync_registry
from trackdesk.application.services import LiveCollection, SyncRegistry
from trackdesk.core.config import get_settings
from trackdesk.domain.value_objects import Identity
from trackdesk.schemas.collection import CollectionResponse, CreatedResponse
from trackdesk.shared.utils.sanitization import sanitize_deep

logger = logging.getLogger(__name__)

router = APIRouter()


@asynccontextmanager
async def open_collection(
    registry: SyncRegistry, collection: str, identity: Identity | None
) -> AsyncIterator[LiveCollection]:
    """Hold the shared cache for the caller, waiting briefly for its first snapshot."""
    async with registry.collection(collection, identity) as cache:
        try:
            await cache.wait_loaded(get_settings().snapshot_timeout_seconds)
        except TimeoutError:
            logger.warning("Timed out waiting for first snapshot of %s", cache.path)
        yield cache


@router.get("/{collection}", response_model=CollectionResponse)
async def list_records(
    collection: str,
    identity: Annotated[Identity | None, Depends(get_identity_optional)],
    registry: Annotated[SyncRegistry, Depends(get_sync_registry)],
) -> CollectionResponse:
    """Return the mirrored records. Unavailable partitions read as empty."""
    async with open_collection(registry, collection, identity) as cache:
        return CollectionResponse(data=cache.data, loading=cache.loading)


@router.post("/{collection}", response_model=CreatedResponse, status_code=201)
async def add_record(
    collection: str,
    identity: Annotated[Identity | None, Depends(get_identity_optional)],
    registry: Annotated[SyncRegistry, Depends(get_sync_registry)],
    body: Annotated[dict[str, Any], Body()],
) -> CreatedResponse:
    """Store body under a new push key (keys sanitized for the store)."""
    item = sanitize_deep(body, substitute=get_settings().key_substitute)
    async with registry.collection(collection, identity) as cache:
        return CreatedResponse(id=await cache.add(item))


@router.patch("/{collection}/{item_id}", status_code=204)
async def update_record(
    collection: str,
    item_id: str,
    identity: Annotated[Identity | None, Depends(get_identity_optional)],
    registry: Annotated[SyncRegistry, Depends(get_sync_registry)],
    body: Annotated[dict[str, Any], Body()],
) -> Response:
    """Merge body over the mirrored record and overwrite it."""
    partial = sanitize_deep(body, substitute=get_settings().key_substitute)
    async with open_collection(registry, collection, identity) as cache:
        await cache.update(item_id, partial)
    return Response(status_code=204)


@router.delete("/{collection}/{item_id}", status_code=204)
async def remove_record(
    collection: str,
    item_id: str,
    identity: Annotated[Identity | None, Depends(get_identity_optional)],
    registry: Annotated[SyncRegistry, Depends(get_sync_registry)],
) -> Response:
    async with registry.collection(collection, identity) as cache:
        await cache.remove_by_id(item_id)
    return Response(status_code=204)
