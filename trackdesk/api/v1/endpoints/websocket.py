"""WebSocket endpoint: live snapshots of one collection partition.

Uses the connection manager and sync registry from app.state (set in lifespan).
Requires a valid JWT via query param ?token=... before registering the connection.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from trackdesk.api.v1.dependencies import identity_from_token
from trackdesk.core.config import get_settings
from trackdesk.domain.exceptions import ValidationException

logger = logging.getLogger(__name__)

router = APIRouter()


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


@router.websocket("/ws/collections/{collection}")
async def collection_stream(websocket: WebSocket, collection: str):
    """Send {"type": "snapshot", "collection", "data"} now and after every change."""
    manager = websocket.app.state.ws_manager
    registry = websocket.app.state.sync_registry
    token = websocket.query_params.get("token")
    if not token:
        await _reject_websocket(websocket, "Missing token")
        return
    identity = identity_from_token(token)
    if identity is None:
        await _reject_websocket(websocket, "Invalid token")
        return
    try:
        path = registry.resolver.resolve(collection, identity)
    except ValidationException as e:
        await _reject_websocket(websocket, e.message)
        return
    if path is None:
        await _reject_websocket(websocket, "Collection not available")
        return

    await websocket.accept()
    # The connection holds the cache open until it disconnects.
    async with registry.collection(collection, identity) as cache:
        await manager.connect(websocket, path)
        try:
            try:
                await cache.wait_loaded(get_settings().snapshot_timeout_seconds)
            except TimeoutError:
                logger.warning("Timed out waiting for first snapshot of %s", path)
            await websocket.send_json(
                {"type": "snapshot", "collection": collection, "data": cache.data}
            )
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            await manager.disconnect(websocket)
