"""Calendar utilities.

This module provides the date arithmetic shared by the stages: trailing day
and week windows anchored on the as-of date, month arithmetic, and the
weekday shape used for platform usage counters.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta


class UsageCalendar:
    """Weekday shape for daily platform usage.

    Email campaigns peak mid-week and social posting stops on weekends.

    Example:
        >>> cal = UsageCalendar()
        >>> cal.is_peak_email_day(date(2025, 1, 7))  # Tuesday
        True
        >>> cal.is_weekend(date(2025, 1, 11))  # Saturday
        True
    """

    def __init__(
        self,
        peak_email_weekdays: tuple[int, ...] = (1, 3),
        weekend_weekdays: tuple[int, ...] = (5, 6),
    ) -> None:
        """Initialize the calendar.

        Args:
            peak_email_weekdays: Weekdays with heavy email volume (0=Monday)
            weekend_weekdays: Weekdays treated as the weekend (0=Monday)
        """
        self.peak_email_weekdays = peak_email_weekdays
        self.weekend_weekdays = weekend_weekdays

    def is_peak_email_day(self, day: date) -> bool:
        return day.weekday() in self.peak_email_weekdays

    def is_weekend(self, day: date) -> bool:
        return day.weekday() in self.weekend_weekdays


DEFAULT_USAGE_CALENDAR = UsageCalendar()


def reference_datetime(as_of: date) -> datetime:
    """Return the timestamp that stands for 'now' on the as-of date (midnight)."""
    return datetime.combine(as_of, time.min)


def trailing_days(as_of: date, count: int) -> list[date]:
    """Return the ``count`` days ending on ``as_of``, oldest first.

    Args:
        as_of: Last day of the window (included)
        count: Number of days

    Returns:
        Ascending list of dates
    """
    return [as_of - timedelta(days=offset) for offset in range(count - 1, -1, -1)]


def week_start(day: date) -> date:
    """Return the Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def trailing_week_starts(as_of: date, count: int) -> list[date]:
    """Return ``count`` Monday snapshot dates ending with the current week, oldest first."""
    current = week_start(as_of)
    return [current - timedelta(weeks=offset) for offset in range(count - 1, -1, -1)]


def add_months(day: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length.

    Example:
        >>> add_months(date(2024, 1, 31), 1)
        datetime.date(2024, 2, 29)
    """
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def months_between(start: date, end: date) -> int:
    """Whole calendar-month boundaries crossed between two dates."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def as_date(value: date | datetime) -> date:
    """Normalize a date or datetime to a date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def as_datetime(value: date | datetime) -> datetime:
    """Normalize a date or datetime to a datetime (dates map to midnight)."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)
