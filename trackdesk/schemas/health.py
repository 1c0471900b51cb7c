"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready when ready."""

    status: str = Field(default="ok", description="Readiness status")
    store_backend: str = Field(..., description="Realtime store backend in use")
    open_partitions: int = Field(default=0, description="Live caches currently subscribed")
    stream_connections: int = Field(default=0, description="WebSocket clients watching a partition")


class ReadinessErrorResponse(BaseModel):
    """Response for GET /health/ready when the store is not wired (503)."""

    status: str = Field(default="not_ready", description="Readiness status")
    message: str = Field(..., description="Reason (e.g. store not initialized)")
