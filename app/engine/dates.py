"""Calendar helpers shared by the engine. Pure, never raises."""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

SUNDAY = 6  # date.weekday(): Monday == 0


def week_start(d: date) -> date:
    """Monday of the week containing `d` (weeks run Monday..Sunday)."""
    return d - timedelta(days=d.weekday())


def week_end(d: date) -> date:
    return week_start(d) + timedelta(days=6)


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_end(d: date) -> date:
    _, last = calendar.monthrange(d.year, d.month)
    return d.replace(day=last)


def is_sunday(d: date) -> bool:
    return d.weekday() == SUNDAY


def is_last_day_of_month(d: date) -> bool:
    return d == month_end(d)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date in [start, end]. Empty when start > end."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def days_between(start: date, end: date) -> int:
    return (end - start).days


def parse_date(value: object) -> date | None:
    """Coerce a date, datetime, or ISO string to a date. None on failure."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def today_in(tz_name: str) -> date:
    """Wall-clock date in `tz_name`. Only the HTTP layer should call this."""
    return datetime.now(ZoneInfo(tz_name)).date()
