"""
Calendar helpers.

All month bucketing happens on the local wall-clock calendar: an instant
is converted to the configured (or host) timezone before its year, month
and day are read. Naive datetimes are taken to be local already.
"""

import calendar
from datetime import date, datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta


Instant = Union[str, datetime, date]


def parse_instant(value: Instant) -> datetime:
    """Parse an ISO-8601 string (a trailing 'Z' is accepted) into a datetime."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_local(value: Instant, tz_name: Optional[str] = None) -> datetime:
    """Convert an instant to local wall-clock time."""
    moment = parse_instant(value)
    if moment.tzinfo is None:
        return moment
    if tz_name:
        return moment.astimezone(ZoneInfo(tz_name))
    return moment.astimezone()


def month_key(value: Union[date, datetime]) -> str:
    """Format a date as the 'YYYY-MM' key used throughout the budget map."""
    return f"{value.year:04d}-{value.month:02d}"


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def trailing_months(year: int, month: int, count: int) -> list[date]:
    """First day of each of the `count` months ending at (year, month), oldest first."""
    end = date(year, month, 1)
    return [end - relativedelta(months=i) for i in range(count - 1, -1, -1)]


def add_months(value: date, months: int) -> date:
    """
    Move a date by whole months.

    The day is clamped to the last day of the target month
    (Jan 31 + 1 month -> Feb 28/29).
    """
    return value + relativedelta(months=months)


def is_same_month(a: Union[date, datetime], b: Union[date, datetime]) -> bool:
    return a.year == b.year and a.month == b.month
