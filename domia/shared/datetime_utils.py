"""
Datetime helpers.

All timestamps are stored as naive UTC datetimes; anything coming from the
API is converted on the way in so comparisons never mix aware and naive values.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as a naive UTC datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already"""
    if value is None:
        return None
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Start (inclusive) and end (exclusive) of a calendar day"""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def minutes_between(start: datetime, end: datetime) -> int:
    return round((end - start).total_seconds() / 60)


def calendar_days_spanned(start: datetime, end: datetime) -> int:
    """Number of calendar days touched by [start, end], both ends included"""
    return (end.date() - start.date()).days + 1
