"""Shared utilities: telemetry and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from trackdesk.shared.utils import (
    ensure_utc,
    generate_push_key,
    sanitize_deep,
    sanitize_key,
    utc_now,
)

__all__ = [
    "ensure_utc",
    "generate_push_key",
    "sanitize_deep",
    "sanitize_key",
    "utc_now",
]
