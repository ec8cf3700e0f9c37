"""
UTC datetime utilities for consistent timezone handling.

All datetime values stored in documents should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Used when decoding timestamps read back from a document store.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def to_rfc3339(dt: datetime) -> str:
    """Format a datetime as the RFC 3339 UTC string Firestore expects (microsecond precision)."""
    aware = ensure_utc(dt)
    return aware.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
