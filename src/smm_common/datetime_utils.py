"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def iso_or_empty(value: datetime | None) -> str:
    """ISO8601 string for API payloads; empty string when the column is NULL."""
    return value.isoformat() if value else ""
