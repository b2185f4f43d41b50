"""
Datetime helpers shared by models, services and event payloads.

All timestamps are produced as timezone-aware UTC and serialized with a 'Z' suffix.
"""
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    """
    Get current UTC time as timezone-aware datetime.

    Used for conversation touches and read timestamps.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Normalize a datetime to timezone-aware UTC.

    SQLite hands back naive datetimes; those are treated as UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def to_iso_utc(dt: datetime | None) -> str | None:
    """
    Convert datetime to ISO format with 'Z' suffix.

    Example:
        >>> to_iso_utc(datetime(2025, 12, 16, 11, 30, tzinfo=timezone.utc))
        '2025-12-16T11:30:00Z'
    """
    if dt is None:
        return None

    return ensure_utc(dt).isoformat().replace('+00:00', 'Z')


def json_ready(obj: Any) -> Any:
    """Recursively convert datetimes inside dicts/lists to ISO strings for transport."""
    if isinstance(obj, dict):
        return {k: json_ready(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [json_ready(item) for item in obj]
    if isinstance(obj, datetime):
        return to_iso_utc(obj)
    return obj
