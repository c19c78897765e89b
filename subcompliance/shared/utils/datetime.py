"""
UTC datetime and calendar utilities for consistent date handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

import calendar
from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes.
    SQLite (tests) returns naive datetimes even for timezone=True columns.

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume it's UTC and attach timezone
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def add_months(start: date, months: int) -> date:
    """
    Add calendar months to a date, clamping to the last day of the target month.

    31 Jan + 1 month is 28/29 Feb; 29 Feb + 12 months is 28 Feb.

    Args:
        start: Start date
        months: Number of months to add (may be negative)

    Returns:
        Shifted date
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def next_calendar_date(start: date, month: int, day: int) -> date:
    """
    Return the next occurrence of month/day strictly after start.

    29 Feb falls back to 28 Feb in non-leap years.

    Args:
        start: Reference date
        month: Calendar month (1-12)
        day: Day of month

    Returns:
        First date > start with the given month and day
    """
    year = start.year
    candidate = _clamped_date(year, month, day)
    if candidate <= start:
        candidate = _clamped_date(year + 1, month, day)
    return candidate


def _clamped_date(year: int, month: int, day: int) -> date:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))
