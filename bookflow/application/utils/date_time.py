from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta
from typing import Iterator

MINUTES_PER_DAY = 24 * 60

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_calendar_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD string. Returns None if the text is not a real calendar date."""
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    if not DATE_PATTERN.match(normalized):
        return None
    try:
        return date.fromisoformat(normalized)
    except ValueError:
        return None


def parse_clock_time(value: str | None) -> time | None:
    """Parse a 24-hour H:MM / HH:MM string. Returns None if it does not match."""
    if not isinstance(value, str):
        return None
    match = TIME_PATTERN.match(value.strip())
    if not match:
        return None
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def format_calendar_date(value: date) -> str:
    return calendar_day(value).isoformat()


def format_clock_time(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def to_minutes(value: time) -> int:
    """Minutes since midnight."""
    return value.hour * 60 + value.minute


def minutes_to_clock(minutes: int) -> time:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"{minutes} minutes is not a time of day")
    return time(hour=minutes // 60, minute=minutes % 60)


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open overlap test: [a_start, a_end) and [b_start, b_end)."""
    return a_start < b_end and b_start < a_end


def calendar_day(value: date | datetime) -> date:
    """Drop any time-of-day component."""
    return date(value.year, value.month, value.day)


def same_calendar_day(a: date | datetime, b: date | datetime) -> bool:
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every calendar date in [start, end]."""
    current = calendar_day(start)
    last = calendar_day(end)
    while current <= last:
        yield current
        current += timedelta(days=1)


def first_day_of_month(year: int, month: int) -> date:
    return date(year, month, 1)


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_days(year: int, month: int) -> list[date]:
    return list(iter_dates(first_day_of_month(year, month), last_day_of_month(year, month)))
