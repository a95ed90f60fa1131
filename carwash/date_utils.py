"""
Day / week / month boundaries in the business timezone.

Every "day" and "month" the business talks about is a Cairo day or month,
whatever timezone the server runs in. Ranges are returned as aware UTC
datetimes; the database stores naive UTC, see ``to_db``.
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo

from carwash import errors
from carwash.config import settings

BUSINESS_TZ = ZoneInfo(settings.business_timezone)

# Last representable instant of a range, millisecond precision
_END_OFFSET = timedelta(milliseconds=1)


class DateRange(NamedTuple):
    start: datetime
    end: datetime


def utcnow() -> datetime:
    """Current instant as naive UTC, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Tags a naive datetime as UTC; converts an aware one to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db(value: Optional[datetime]) -> Optional[datetime]:
    """Naive UTC form of ``value`` for storage and query parameters."""
    if value is None:
        return None
    return as_utc(value).replace(tzinfo=None)


def business_today() -> date:
    return as_utc(utcnow()).astimezone(BUSINESS_TZ).date()


def current_month() -> str:
    return business_today().strftime("%Y-%m")


def parse_date(date_str: str) -> date:
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise errors.ValidationError(f"Invalid date '{date_str}', expected YYYY-MM-DD")


def parse_month(month_str: str) -> date:
    try:
        return datetime.strptime(month_str, "%Y-%m").date()
    except (TypeError, ValueError):
        raise errors.ValidationError(f"Invalid month '{month_str}', expected YYYY-MM")


def _local_midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=BUSINESS_TZ)


def _range(first_day: date, next_first_day: date) -> DateRange:
    start = _local_midnight(first_day)
    end = _local_midnight(next_first_day) - _END_OFFSET
    return DateRange(start.astimezone(timezone.utc), end.astimezone(timezone.utc))


def day_range(date_str: str) -> DateRange:
    day = parse_date(date_str)
    return _range(day, day + timedelta(days=1))


def month_range(month_str: str) -> DateRange:
    first = parse_month(month_str)
    if first.month == 12:
        next_first = date(first.year + 1, 1, 1)
    else:
        next_first = date(first.year, first.month + 1, 1)
    return _range(first, next_first)


def week_range(date_str: str) -> DateRange:
    """Sunday to Saturday week containing the given day."""
    day = parse_date(date_str)
    # weekday(): Monday=0 .. Sunday=6
    sunday = day - timedelta(days=(day.weekday() + 1) % 7)
    return _range(sunday, sunday + timedelta(days=7))


def today_range() -> DateRange:
    return day_range(business_today().isoformat())


def resolve_range(date_str: Optional[str] = None, month_str: Optional[str] = None) -> DateRange:
    """``date`` wins over ``month``; neither means today."""
    if date_str:
        return day_range(date_str)
    if month_str:
        return month_range(month_str)
    return today_range()


def elapsed_minutes(entry_time: datetime, finish_time: datetime) -> int:
    # Halves round up, never to even
    seconds = (as_utc(finish_time) - as_utc(entry_time)).total_seconds()
    return int(math.floor(seconds / 60 + 0.5))


def format_business_datetime(value: Optional[datetime], fmt: str = "%Y-%m-%d %H:%M:%S") -> Optional[str]:
    if value is None:
        return None
    return as_utc(value).astimezone(BUSINESS_TZ).strftime(fmt)
