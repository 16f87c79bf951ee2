"""
Daybook - Date helpers.

Weeks run Monday..Sunday (ISO). The Monday is the stable key for a
week's meal plan and grocery list.
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def to_date(value: str | date | datetime) -> date:
    """
    Coerce an ISO string, date or datetime to a date.

    Strings may carry a time part ("2025-03-12T10:00:00"); only the
    date portion is used.

    Raises:
        ValueError: If the string is not an ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def week_start(value: str | date | datetime) -> date:
    """Monday of the ISO week containing value."""
    day = to_date(value)
    return day - timedelta(days=day.weekday())


def week_bounds(value: str | date | datetime) -> tuple[date, date]:
    """(Monday, Sunday) of the ISO week containing value."""
    monday = week_start(value)
    return monday, monday + timedelta(days=6)


def next_weekday(today: date, weekday: int) -> date:
    """
    Next occurrence of weekday (Monday=0) strictly after today.

    If today is that weekday, returns the same day next week.
    """
    days_until = (weekday - today.weekday()) % 7
    return today + timedelta(days=days_until or 7)


def weekday_index(name: str) -> int:
    """Monday=0 index for a lowercase or mixed-case weekday name."""
    return WEEKDAYS.index(name.lower())


def today_in(tz_name: str) -> datetime:
    """Current wall-clock time in the given IANA timezone."""
    return datetime.now(ZoneInfo(tz_name))
