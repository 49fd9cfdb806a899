"""Timezone and timestamp utilities"""
from datetime import datetime
from typing import Optional
import pytz


def to_utc(dt: datetime, tz: Optional[str] = None) -> datetime:
    """
    Convert a datetime to naive UTC.

    Args:
        dt: Datetime object (naive or timezone-aware)
        tz: Optional timezone string (e.g., 'America/New_York')
            If provided and dt is naive, dt is assumed to be in that timezone

    Returns:
        Naive datetime object in UTC
    """
    if dt.tzinfo is None:
        if tz:
            dt = pytz.timezone(tz).localize(dt)
        else:
            dt = pytz.UTC.localize(dt)

    return dt.astimezone(pytz.UTC).replace(tzinfo=None)


def now_utc() -> datetime:
    """Get current UTC time as naive datetime"""
    return datetime.now(pytz.UTC).replace(tzinfo=None)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO timestamp back into naive UTC, passing None through"""
    if not value:
        return None
    return to_utc(datetime.fromisoformat(value))


def seconds_between(earlier: datetime, later: datetime) -> float:
    """Seconds elapsed from earlier to later (negative if later is earlier)"""
    return (to_utc(later) - to_utc(earlier)).total_seconds()
