"""
Date helpers shared by the normalizer, filters and recommendations.

Event dates are naive local ``YYYY-MM-DD`` strings with an optional
``HH:MM:SS`` start time; all comparisons here use naive local datetimes.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^\d{2}:\d{2}:\d{2}$")
API_DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` string into a real calendar date."""
    if not value or not DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_time(value: Optional[str]) -> Optional[time]:
    """Parse a strict ``HH:MM:SS`` string with in-range components."""
    if not value or not TIME_PATTERN.match(value):
        return None
    hours, minutes, seconds = (int(part) for part in value.split(":"))
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    return time(hours, minutes, seconds)


def to_datetime(date_str: Optional[str], time_str: Optional[str] = None) -> Optional[datetime]:
    """
    Combine an event date and optional time into a naive local datetime.

    A missing or invalid time means midnight.
    """
    day = parse_date(date_str)
    if day is None:
        return None
    return datetime.combine(day, parse_time(time_str) or time.min)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def is_event_upcoming(
    date_str: Optional[str],
    time_str: Optional[str] = None,
    now: Optional[datetime] = None,
) -> bool:
    """True when the event starts strictly after ``now``."""
    start = to_datetime(date_str, time_str)
    if start is None:
        return False
    return start > (now or datetime.now())


def is_event_past(
    date_str: Optional[str],
    time_str: Optional[str] = None,
    now: Optional[datetime] = None,
) -> bool:
    start = to_datetime(date_str, time_str)
    if start is None:
        return False
    return start < (now or datetime.now())


def is_event_today(date_str: Optional[str], now: Optional[datetime] = None) -> bool:
    day = parse_date(date_str)
    return day is not None and day == (now or datetime.now()).date()


def get_days_between(start_date: str, end_date: str) -> int:
    """Whole days from ``start_date`` to ``end_date`` (0 when either is invalid)."""
    start, end = parse_date(start_date), parse_date(end_date)
    if start is None or end is None:
        return 0
    return (end - start).days


def _short(day: date) -> str:
    return f"{day:%b} {day.day}"


def _long(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


def get_date_range_display(start_date: str, end_date: str) -> str:
    """
    Human-readable range, collapsing shared month/year.

    Examples: ``Mar 5, 2026``, ``Mar 5 - 7, 2026``, ``Mar 30 - Apr 2, 2026``,
    ``December 30, 2026 - January 2, 2027``.
    """
    start, end = parse_date(start_date), parse_date(end_date)
    if start is None:
        return ""
    if end is None or start == end:
        return f"{_short(start)}, {start.year}"
    if (start.year, start.month) == (end.year, end.month):
        return f"{_short(start)} - {end.day}, {end.year}"
    if start.year == end.year:
        return f"{_short(start)} - {_short(end)}, {end.year}"
    return f"{_long(start)} - {_long(end)}"


def format_api_datetime(moment: datetime) -> str:
    """
    Format an instant as the provider's ``YYYY-MM-DDTHH:mm:ssZ`` (UTC).

    Naive datetimes are taken as local time.
    """
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def is_api_datetime(value: str) -> bool:
    return bool(API_DATETIME_PATTERN.match(value))


def coerce_api_datetime(value: Optional[str]) -> Optional[str]:
    """
    Return ``value`` when already in provider format, else try to reformat it.

    Unparseable input yields None so the parameter is dropped.
    """
    if not value:
        return None
    if is_api_datetime(value):
        return value
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return format_api_datetime(parsed)
