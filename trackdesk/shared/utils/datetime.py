"""UTC time helpers.

Stored records carry timestamps as ISO-8601 strings written by browsers
(e.g. '2025-03-01T00:00:00.000Z'). Everything here works in aware UTC.
"""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def now_ms() -> int:
    """Milliseconds since the epoch; the time component of push keys."""
    return int(utc_now().timestamp() * 1000)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes and convert aware ones; None passes through."""
    if dt is None:
        return None
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)


def parse_iso_date(value: str | date | datetime) -> date:
    """Return the UTC calendar date of an ISO-8601 string, date or datetime.

    Raises:
        ValueError: value is a string that is not ISO-8601.
    """
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    if isinstance(value, date):
        return value
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00"))).date()
