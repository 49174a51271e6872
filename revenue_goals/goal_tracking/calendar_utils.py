# revenue_goals/goal_tracking/calendar_utils.py
"""
Calendar / Proration Utilities

Pure date math shared by the goal calculator, filters and metrics.

Every calendar day is handled in its noon-normalized form (12:00) or as an
ISO 'YYYY-MM-DD' key, so that day arithmetic never drifts across a
daylight-saving or timezone boundary.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator, Union

import pandas as pd

DateLike = Union[date, datetime, pd.Timestamp, str]

NOON = time(12, 0)
END_OF_DAY = time(23, 59, 59, 999000)


def _to_datetime(value: DateLike) -> datetime:
    """Coerce any supported date-like value to a naive datetime."""
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    elif isinstance(value, str):
        value = pd.Timestamp(value).to_pydatetime()

    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time.min)

    raise TypeError(f"Unsupported date value: {value!r}")


def to_date(value: DateLike) -> date:
    """Calendar day of a date-like value."""
    return _to_datetime(value).date()


def normalize_to_noon(value: DateLike) -> datetime:
    """Same calendar day pinned to 12:00."""
    return datetime.combine(to_date(value), NOON)


def to_iso_key(value: DateLike) -> str:
    """'YYYY-MM-DD' key of the calendar day."""
    return to_date(value).isoformat()


def start_of_day(value: DateLike) -> datetime:
    return datetime.combine(to_date(value), time.min)


def end_of_day(value: DateLike) -> datetime:
    """23:59:59.999 of the calendar day."""
    return datetime.combine(to_date(value), END_OF_DAY)


def days_in_month(value: DateLike) -> int:
    d = to_date(value)
    return calendar.monthrange(d.year, d.month)[1]


def is_weekend(value: DateLike) -> bool:
    """True for Saturday and Sunday."""
    return to_date(value).weekday() >= 5


def add_days(value: DateLike, days: int) -> datetime:
    """Shift by whole calendar days, keeping the noon normalization."""
    return normalize_to_noon(to_date(value) + timedelta(days=days))


def start_of_week(value: DateLike, week_starts_on: int = 0) -> datetime:
    """
    First day of the week containing value (00:00).

    Args:
        value: Any date-like value
        week_starts_on: 0 = Monday ... 6 = Sunday
    """
    d = to_date(value)
    offset = (d.weekday() - week_starts_on) % 7
    return start_of_day(d - timedelta(days=offset))


def start_of_month(value: DateLike) -> datetime:
    d = to_date(value)
    return datetime(d.year, d.month, 1)


def end_of_month(value: DateLike) -> datetime:
    d = to_date(value)
    return end_of_day(date(d.year, d.month, days_in_month(d)))


def start_of_year(value: DateLike) -> datetime:
    return datetime(to_date(value).year, 1, 1)


def calendar_day_difference(a: DateLike, b: DateLike) -> int:
    """Whole calendar days from b to a (a - b), ignoring time of day."""
    return (to_date(a) - to_date(b)).days


def inclusive_day_count(start: DateLike, end: DateLike) -> int:
    """Number of calendar days in [start, end]; 0 when start > end."""
    return max(calendar_day_difference(end, start) + 1, 0)


def iter_days(start: DateLike, end: DateLike) -> Iterator[datetime]:
    """Yield every noon-normalized day from start to end inclusive."""
    current = to_date(start)
    last = to_date(end)
    while current <= last:
        yield normalize_to_noon(current)
        current += timedelta(days=1)


def yesterday_of(today: DateLike) -> datetime:
    """D-1: the reference day for attainment calculations."""
    return add_days(today, -1)


__all__ = [
    'DateLike',
    'to_date',
    'normalize_to_noon',
    'to_iso_key',
    'start_of_day',
    'end_of_day',
    'days_in_month',
    'is_weekend',
    'add_days',
    'start_of_week',
    'start_of_month',
    'end_of_month',
    'start_of_year',
    'calendar_day_difference',
    'inclusive_day_count',
    'iter_days',
    'yesterday_of',
]
