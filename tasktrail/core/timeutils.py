"""
Timestamps are timezone-aware UTC.

Columns are declared with UTC_DATETIME so Postgres keeps the offset. SQLite drops it
on the way back, so values read from the database go through to_utc before they are
compared with anything.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime

UTC_DATETIME = DateTime(timezone=True)


def utcnow() -> datetime:
    """Current time as aware UTC."""
    return datetime.now(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert a datetime to aware UTC; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
