"""Shared utilities: datetime, generators, sanitization."""

from trackdesk.shared.utils.datetime import (
    ensure_utc,
    now_ms,
    parse_iso_date,
    utc_now,
)
from trackdesk.shared.utils.generators import generate_push_key
from trackdesk.shared.utils.ordering import ordered_children, store_key_order
from trackdesk.shared.utils.sanitization import (
    KeyCollisionError,
    KeySanitizer,
    SanitizedKey,
    find_key_collisions,
    sanitize_deep,
    sanitize_key,
)

__all__ = [
    "generate_push_key",
    "utc_now",
    "now_ms",
    "ensure_utc",
    "parse_iso_date",
    "ordered_children",
    "store_key_order",
    "KeyCollisionError",
    "KeySanitizer",
    "SanitizedKey",
    "find_key_collisions",
    "sanitize_deep",
    "sanitize_key",
]
