"""Objects API: single values mirrored from the caller's partition."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Response

from trackdesk.api.v1.dependencies import get_identity_optional, get_sync_registry
from trackdesk.application.services import SyncRegistry
from trackdesk.core.config import get_settings
from trackdesk.domain.value_objects import Identity
from trackdesk.schemas.collection import ObjectResponse
from trackdesk.shared.utils.sanitization import sanitize_deep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{name}", response_model=ObjectResponse)
async def get_object(
    name: str,
    identity: Annotated[Identity | None, Depends(get_identity_optional)],
    registry: Annotated[SyncRegistry, Depends(get_sync_registry)],
) -> ObjectResponse:
    async with registry.object(name, identity) as cache:
        try:
            await cache.wait_loaded(get_settings().snapshot_timeout_seconds)
        except TimeoutError:
            logger.warning("Timed out waiting for first snapshot of %s", cache.path)
        return ObjectResponse(value=cache.value, loading=cache.loading)


@router.put("/{name}", status_code=204)
async def put_object(
    name: str,
    identity: Annotated[Identity | None, Depends(get_identity_optional)],
    registry: Annotated[SyncRegistry, Depends(get_sync_registry)],
    body: Annotated[Any, Body()],
) -> Response:
    """Overwrite the whole value (no merge)."""
    value = sanitize_deep(body, substitute=get_settings().key_substitute)
    async with registry.object(name, identity) as cache:
        await cache.set(value)
    return Response(status_code=204)
