"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (storage columns carry no tzinfo)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_date(value: date | datetime) -> date:
    """Truncate a datetime to its calendar date; dates pass through"""
    if isinstance(value, datetime):
        return value.date()
    return value


def last_day_of_month(day: date) -> date:
    """Last calendar day of the month containing `day` (leap years included)"""
    _, days_in_month = calendar.monthrange(day.year, day.month)
    return day.replace(day=days_in_month)
