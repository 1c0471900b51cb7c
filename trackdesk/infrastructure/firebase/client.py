"""Realtime Database client (REST-based, no firebase-admin).

Initialized at app startup using either FIREBASE_SERVICE_ACCOUNT_KEY (JSON string)
or FIREBASE_SERVICE_ACCOUNT_PATH (file path), against FIREBASE_DATABASE_URL.
Uses the Realtime Database REST and streaming API with google-auth.
"""

import json
import logging
from pathlib import Path

from trackdesk.core.config import get_settings
from trackdesk.infrastructure.firebase._rest_client import (
    RealtimeDatabaseRESTClient,
    _get_credentials,
)

logger = logging.getLogger(__name__)

_realtime_client: RealtimeDatabaseRESTClient | None = None


def _load_key_dict():
    """Return service account dict from env key or file path."""
    settings = get_settings()
    key_json = settings.firebase_service_account_key.get_secret_value() if settings.firebase_service_account_key else None
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            logger.warning(
                "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
                path,
                resolved,
            )
            return None
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def init_realtime_database() -> bool:
    """Initialize the Realtime Database client (REST API + google-auth).

    Idempotent if already initialized. On missing or malformed credentials,
    logs and returns False so the caller can decide whether to start.

    Returns:
        True if the client was initialized, False otherwise.
    """
    global _realtime_client
    if _realtime_client is not None:
        return True
    try:
        key_dict = _load_key_dict()
        if not key_dict:
            logger.error("No Firebase service account configured")
            return False
        settings = get_settings()
        cred = _get_credentials(key_dict)
        _realtime_client = RealtimeDatabaseRESTClient(
            settings.firebase_database_url,
            cred,
            timeout=settings.http_timeout_seconds,
        )
        logger.info("Realtime Database client ready for %s", settings.firebase_database_url)
        return True
    except Exception:
        logger.exception("Realtime Database initialization failed")
        return False


def get_realtime_client() -> RealtimeDatabaseRESTClient | None:
    """Return the Realtime Database client, or None if not initialized."""
    return _realtime_client


async def close_realtime_database() -> None:
    """Stop streams and close the HTTP connection pool. Call from app shutdown."""
    global _realtime_client
    if _realtime_client is not None:
        await _realtime_client.aclose()
        _realtime_client = None
        logger.info("Realtime Database client closed")
