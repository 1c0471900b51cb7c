"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from trackdesk.api.v1.dependencies.
"""

from fastapi import APIRouter

from trackdesk.api.v1.endpoints import (
    collections,
    form_entries,
    health,
    objects,
    renewals,
    websocket as ws_endpoint,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(collections.router, prefix="/collections", tags=["collections"])
api_router.include_router(objects.router, prefix="/objects", tags=["objects"])
api_router.include_router(form_entries.router, prefix="/forms", tags=["forms"])
api_router.include_router(renewals.router, prefix="/renewals", tags=["renewals"])
api_router.include_router(ws_endpoint.router, tags=["websocket"])
