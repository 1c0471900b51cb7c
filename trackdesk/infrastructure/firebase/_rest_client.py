"""Thin Firebase Realtime Database REST client (no firebase-admin).

Uses google-auth for service account tokens and the database REST API
({database_url}/{path}.json). Live subscriptions use the REST streaming
endpoint (Server-Sent Events) in a background task per subscription.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.
The database answers 307 to move a client to the shard that owns the data,
so every request follows redirects.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from trackdesk.application.interfaces import (
    ErrorCallback,
    SnapshotCallback,
    SubscriptionError,
    Unsubscribe,
)
from trackdesk.domain.exceptions import StoreWriteException
from trackdesk.infrastructure.firebase._rest_encoding import (
    apply_patch,
    apply_put,
    split_path,
    to_store_value,
)
from trackdesk.infrastructure.firebase._sse import iter_sse_events
from trackdesk.shared.telemetry import add_span_event, traced
from trackdesk.shared.utils.generators import generate_push_key

logger = logging.getLogger(__name__)

_DATABASE_SCOPES = [
    "https://www.googleapis.com/auth/firebase.database",
    "https://www.googleapis.com/auth/userinfo.email",
]
_RECONNECT_DELAY_SECONDS = 1.0


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for the Realtime Database."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=_DATABASE_SCOPES
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


class RealtimeDatabaseRESTClient:
    """Realtime Database client implementing IRealtimeStore over REST + SSE."""

    def __init__(
        self,
        database_url: str,
        credentials=None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        reconnect_delay: float = _RECONNECT_DELAY_SECONDS,
    ) -> None:
        self._base = database_url.rstrip("/")
        self._credentials = credentials
        self._http = (
            http_client
            if http_client is not None
            else httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        )
        self._owns_http = http_client is None
        self._timeout = timeout
        self._reconnect_delay = reconnect_delay
        self._listeners: set[asyncio.Task] = set()

    async def aclose(self) -> None:
        """Stop live subscriptions and close the HTTP client if we created it."""
        for task in list(self._listeners):
            task.cancel()
        if self._listeners:
            await asyncio.gather(*self._listeners, return_exceptions=True)
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str | None:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        if self._credentials is None:
            return None
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def _url(self, path: str) -> str:
        segments = "/".join(quote(segment, safe="") for segment in split_path(path))
        return f"{self._base}/{segments}.json"

    async def _params(self, **extra: str) -> dict[str, str]:
        token = await self.get_token()
        params = dict(extra)
        if token:
            params["access_token"] = token
        return params

    @traced("rtdb.read")
    async def read(self, path: str) -> Any:
        """Return the value at path once (None when absent)."""
        resp = await self._http.get(
            self._url(path), params=await self._params(), follow_redirects=True
        )
        resp.raise_for_status()
        return resp.json()

    @traced("rtdb.write_full")
    async def write_full(self, path: str, value: Any) -> None:
        """Replace the value at path (None, or a value with no members, deletes)."""
        body = to_store_value(value)
        if body is None:
            await self.delete(path)
            return
        await self._send("PUT", path, body)

    @traced("rtdb.delete")
    async def delete(self, path: str) -> None:
        """Remove the node at path. Idempotent if already missing."""
        await self._send("DELETE", path)

    def generate_child_key(self, path: str) -> str:
        return generate_push_key()

    async def _send(self, method: str, path: str, body: Any = None) -> None:
        try:
            resp = await self._http.request(
                method,
                self._url(path),
                params=await self._params(print="silent"),
                json=body,
                follow_redirects=True,
            )
        except httpx.HTTPError as e:
            add_span_event("store.write_failed", {"path": path})
            raise StoreWriteException(path, f"Store unreachable: {e}") from e
        if resp.status_code not in (200, 204):
            add_span_event("store.write_rejected", {"path": path, "status": resp.status_code})
            logger.warning("%s %s rejected with HTTP %s", method, path, resp.status_code)
            raise StoreWriteException(
                path, f"Store rejected {method} ({resp.status_code})", resp.status_code
            )

    async def subscribe(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        """Stream snapshots of path until the returned callable is invoked."""
        task = asyncio.get_running_loop().create_task(
            self._listen(path, on_snapshot, on_error), name=f"rtdb-listen:{path}"
        )
        self._listeners.add(task)
        task.add_done_callback(self._listeners.discard)

        def unsubscribe() -> None:
            task.cancel()

        return unsubscribe

    async def _listen(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> None:
        """Apply streamed put / patch events to a local subtree and emit it whole."""
        headers = {"Accept": "text/event-stream"}
        timeout = httpx.Timeout(self._timeout, read=None)
        while True:
            tree: Any = None
            try:
                params = await self._params()
                async with self._http.stream(
                    "GET",
                    self._url(path),
                    params=params,
                    headers=headers,
                    timeout=timeout,
                    follow_redirects=True,
                ) as resp:
                    if resp.status_code != 200:
                        await resp.aread()
                        on_error(SubscriptionError(path, f"HTTP {resp.status_code}"))
                        return
                    async for event in iter_sse_events(resp.aiter_lines()):
                        if event.event in ("put", "patch"):
                            payload = json.loads(event.data)
                            if event.event == "put":
                                tree = apply_put(tree, payload["path"], payload["data"])
                            else:
                                tree = apply_patch(tree, payload["path"], payload["data"])
                            on_snapshot(copy.deepcopy(tree))
                        elif event.event == "cancel":
                            on_error(SubscriptionError(path, f"cancelled: {event.data}"))
                            return
                        elif event.event == "auth_revoked":
                            logger.info("Stream token for %s expired; reconnecting", path)
                            break
            except asyncio.CancelledError:
                raise
            except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
                logger.warning("Stream for %s failed: %s", path, e)
                on_error(e)
                return
            await asyncio.sleep(self._reconnect_delay)
