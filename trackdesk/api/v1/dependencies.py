"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the caller identity and application services.
Services are built from app.state (store, sync registry) set in lifespan;
routes depend only on these dependencies, not on infrastructure directly.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from trackdesk.application.services import (
    EnvelopeCodec,
    FormEntryService,
    RenewalReminderService,
    SyncRegistry,
)
from trackdesk.core.config import get_settings
from trackdesk.domain.exceptions import NotAuthenticatedException
from trackdesk.domain.value_objects import Identity
from trackdesk.infrastructure.security.jwt import identity_from_claims, verify_token

logger = logging.getLogger(__name__)

_http_bearer = HTTPBearer(auto_error=False)


def identity_from_token(token: str) -> Identity | None:
    """Return the Identity carried by a JWT, or None if it is not valid."""
    try:
        return identity_from_claims(verify_token(token))
    except (ValueError, KeyError) as e:
        logger.debug("Rejected token: %s", e)
        return None


async def get_identity_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> Identity | None:
    """Return the caller identity from the Bearer JWT if present and valid; else None.

    Reads with no identity see empty partitions; writes fail with 401.
    """
    if not credentials:
        return None
    return identity_from_token(credentials.credentials)


async def get_identity(
    identity: Annotated[Identity | None, Depends(get_identity_optional)],
) -> Identity:
    """Return the caller identity; raise 401 if missing or invalid."""
    if identity is None:
        raise NotAuthenticatedException()
    return identity


def get_sync_registry(request: Request) -> SyncRegistry:
    """Shared live-cache registry (set in lifespan)."""
    return request.app.state.sync_registry


@lru_cache
def get_envelope_codec() -> EnvelopeCodec:
    """Envelope codec keyed by ENVELOPE_PASSPHRASE (composition root)."""
    return EnvelopeCodec.from_settings()


def get_form_entry_service(
    registry: Annotated[SyncRegistry, Depends(get_sync_registry)],
    codec: Annotated[EnvelopeCodec, Depends(get_envelope_codec)],
) -> FormEntryService:
    settings = get_settings()
    return FormEntryService(
        registry,
        codec,
        key_substitute=settings.key_substitute,
        snapshot_timeout=settings.snapshot_timeout_seconds,
    )


def get_renewal_service(
    registry: Annotated[SyncRegistry, Depends(get_sync_registry)],
) -> RenewalReminderService:
    return RenewalReminderService(
        registry, snapshot_timeout=get_settings().snapshot_timeout_seconds
    )
