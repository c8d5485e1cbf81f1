"""
Time utility functions.
"""

from datetime import datetime, date, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Calendar day in UTC, used for reading windows."""
    return utc_now().date()


def days_ago(days: int, today: Optional[date] = None) -> date:
    """
    Date `days` before `today` (defaults to the current UTC day).

    Saturates at date.min / date.max instead of overflowing.
    """
    try:
        return (today or utc_today()) - timedelta(days=days)
    except OverflowError:
        return date.min if days > 0 else date.max


def day_start(d: date) -> datetime:
    """Midnight at the start of a date."""
    return datetime.combine(d, datetime.min.time())


def day_end(d: date) -> datetime:
    """Last representable instant of a date."""
    return datetime.combine(d, datetime.max.time())
