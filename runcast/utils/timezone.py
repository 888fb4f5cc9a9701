"""Timezone helpers.

The database stores naive UTC timestamps; everything above the store works
with timezone-aware datetimes. These helpers convert at that boundary.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def get_zone(name: str | None) -> ZoneInfo:
    """Get a ZoneInfo for a zone name, defaulting to UTC if invalid/missing."""
    try:
        return ZoneInfo(name or "UTC")
    except Exception:
        return ZoneInfo("UTC")


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC.

    Args:
        dt: Datetime (timezone-aware or naive)

    Returns:
        Datetime in UTC timezone
    """
    if dt.tzinfo is None:
        # Assume UTC if naive
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_naive_utc(dt: datetime) -> datetime:
    """Convert datetime to a naive UTC datetime for storage."""
    return to_utc(dt).replace(tzinfo=None)
