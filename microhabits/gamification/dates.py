"""
Calendar-day normalization

All day-boundary decisions (check-in deduplication, consecutive-day
detection, history windows) are made in UTC so behaviour never depends on
the server's local time.
"""

from datetime import date, datetime, time, timezone
from typing import Union


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def date_only(timestamp: Union[datetime, date]) -> date:
    """
    Truncate a timestamp to its UTC calendar day

    Aware datetimes are converted to UTC first; naive datetimes are taken
    to already be in UTC. Plain dates pass through unchanged.

    Example:
        >>> date_only(datetime.fromisoformat("2024-01-15T23:30:00-05:00"))
        datetime.date(2024, 1, 16)
    """
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(timezone.utc)
        return timestamp.date()
    return timestamp


def day_start(day: date) -> datetime:
    """UTC midnight of a calendar day, for transport as a timestamp"""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)
