"""WebSocket connections grouped by partition path.

Use via app.state.ws_manager (set in lifespan). A socket is registered under
the partition its caller resolved to, so snapshots of one partition never
reach a socket watching another.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Registry of accepted sockets per partition path; drops sockets that fail to send."""

    def __init__(self) -> None:
        self._watchers: defaultdict[str, set[WebSocket]] = defaultdict(set)
        self._path_of: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, path: str) -> None:
        """Register an already accepted socket as a watcher of path."""
        async with self._lock:
            self._watchers[path].add(websocket)
            self._path_of[websocket] = path
        logger.debug("WebSocket watching %s", path)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._forget(websocket)

    async def broadcast_to_partition(self, path: str, message: str | dict[str, Any]) -> None:
        """Send message to every socket watching path.

        Dicts are sent as JSON, strings as text. Sockets that raise while
        sending are unregistered.
        """
        async with self._lock:
            targets = list(self._watchers.get(path, ()))
        if not targets:
            return
        results = await asyncio.gather(
            *(self._deliver(ws, message) for ws in targets), return_exceptions=True
        )
        failed = [ws for ws, result in zip(targets, results) if isinstance(result, Exception)]
        if failed:
            logger.debug("Dropping %d WebSocket(s) on %s after send failure", len(failed), path)
            async with self._lock:
                for ws in failed:
                    self._forget(ws)

    @staticmethod
    async def _deliver(websocket: WebSocket, message: str | dict[str, Any]) -> None:
        if isinstance(message, dict):
            await websocket.send_json(message)
        else:
            await websocket.send_text(message)

    def _forget(self, websocket: WebSocket) -> None:
        path = self._path_of.pop(websocket, None)
        if path is None:
            return
        watchers = self._watchers.get(path)
        if watchers is not None:
            watchers.discard(websocket)
            if not watchers:
                del self._watchers[path]

    def watched_paths(self) -> list[str]:
        return list(self._watchers)

    def connection_count(self) -> int:
        return len(self._path_of)
