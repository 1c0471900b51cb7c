"""Health check endpoint. No dependencies; used for liveness and readiness probes."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from trackdesk.core.config import get_settings
from trackdesk.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Realtime store not wired", "model": ReadinessErrorResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 once the realtime store and sync registry are up; 503 otherwise."""
    registry = getattr(request.app.state, "sync_registry", None)
    if registry is None:
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(message="Realtime store not initialized").model_dump(),
        )
    return ReadinessResponse(
        store_backend=get_settings().store_backend,
        open_partitions=len(registry.open_paths()),
        stream_connections=request.app.state.ws_manager.connection_count(),
    )
