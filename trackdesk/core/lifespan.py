"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (realtime store,
sync registry, WebSocket manager, telemetry).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from trackdesk.core.config import Settings, get_settings
from trackdesk.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _build_store(settings: Settings):
    """Return the realtime store adapter selected by STORE_BACKEND."""
    if settings.store_backend == "memory":
        from trackdesk.infrastructure.memory import InMemoryRealtimeStore

        logger.warning("Using in-memory realtime store; data is not persisted")
        return InMemoryRealtimeStore()

    from trackdesk.infrastructure.firebase import get_realtime_client, init_realtime_database

    if not init_realtime_database():
        raise RuntimeError("Realtime Database could not be initialized; check Firebase settings")
    return get_realtime_client()


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: telemetry (if enabled), realtime store, WebSocket manager,
    sync registry. Shutdown order: live caches, store connection, telemetry.
    """
    settings = get_settings()

    # ---- Startup ----
    if settings.telemetry_enabled:
        from trackdesk.shared.telemetry.telemetry import (
            Telemetry,
            build_exporter,
            set_telemetry,
        )

        telemetry = Telemetry.from_settings(settings)
        telemetry.start(
            app,
            build_exporter(settings.telemetry_exporter, settings.telemetry_otlp_endpoint),
        )
        set_telemetry(telemetry)

    from trackdesk.api.websocket import ConnectionManager
    from trackdesk.application.services import PathResolver, SyncRegistry

    app.state.store = _build_store(settings)
    app.state.ws_manager = ConnectionManager()
    app.state.sync_registry = SyncRegistry(
        app.state.store,
        PathResolver.from_settings(),
        broadcaster=app.state.ws_manager.broadcast_to_partition,
        idle_timeout=settings.cache_idle_seconds,
    )
    logger.info("Realtime store ready (backend=%s)", settings.store_backend)

    yield

    # ---- Shutdown ----
    await app.state.sync_registry.close_all()

    if settings.store_backend == "firebase":
        from trackdesk.infrastructure.firebase import close_realtime_database

        await close_realtime_database()

    from trackdesk.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry = get_telemetry()
    if telemetry is not None:
        telemetry.stop()
        set_telemetry(None)
