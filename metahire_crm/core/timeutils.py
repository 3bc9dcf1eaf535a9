"""
UTC timestamps for model columns and session expiry checks.
"""
from datetime import datetime, timezone

from sqlalchemy import DateTime


# Column type for every timestamp; values are always timezone-aware UTC
UTCDateTime = DateTime(timezone=True)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive values for timezone columns; read them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
