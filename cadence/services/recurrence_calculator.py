"""
Recurrence calculator.

Pure date arithmetic: given a recurrence template and a base date, compute the
next occurrence. No state, no I/O, safe to share between callers.

Works on both ``date`` and ``datetime`` values; the time of day of a
``datetime`` is carried through unchanged.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Iterable, Optional, TypeVar

from cadence.core.exceptions import InvalidIntervalError
from cadence.models.enums import IntervalUnit
from cadence.models.interval import Interval
from cadence.models.recurrence_template import (
    LAST_OCCURRENCE,
    RecurrenceTemplateBase,
    WeekdayOccurrenceMode,
)

D = TypeVar("D", bound=date)


def sunday_based_weekday(value: date) -> int:
    """Weekday number with Sunday=0 ... Saturday=6."""
    return (value.weekday() + 1) % 7


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _shift_month(value: date, months: int) -> tuple[int, int]:
    """Target (year, month) after moving ``months`` months; negative offsets allowed."""
    year_increase, month_index = divmod(value.month - 1 + months, 12)
    return value.year + year_increase, month_index + 1


def add_months(value: D, months: int, preferred_day: Optional[int] = None) -> D:
    """
    Move ``months`` months forward without spilling into the following month.

    The day of month is ``preferred_day`` when given (a template pinned to a
    day), otherwise the current day, clamped to the target month's last day:
    Jan 31 + 1 month is Feb 28 (Feb 29 in leap years).
    """
    year, month = _shift_month(value, months)
    target_day = preferred_day if preferred_day is not None else value.day
    return value.replace(
        year=year, month=month, day=min(target_day, last_day_of_month(year, month))
    )


def add_months_overflowing(value: D, months: int) -> D:
    """
    Move ``months`` months forward, rolling excess days into the next month.

    Jan 31 + 1 month is Mar 2 (Mar 3 outside leap years).
    """
    year, month = _shift_month(value, months)
    last_day = last_day_of_month(year, month)
    overflow = value.day - last_day
    if overflow > 0:
        return value.replace(year=year, month=month, day=last_day) + timedelta(days=overflow)
    return value.replace(year=year, month=month)


def add_years(value: D, years: int) -> D:
    """Same month/day ``years`` later; Feb 29 rolls over to Mar 1 in non-leap years."""
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, month=3, day=1)


def last_weekday_in_month(value: D, weekday: int) -> D:
    """Last date in ``value``'s month falling on ``weekday`` (Sunday=0)."""
    last_day = value.replace(day=last_day_of_month(value.year, value.month))
    days_back = (sunday_based_weekday(last_day) - weekday) % 7
    return last_day - timedelta(days=days_back)


def nth_weekday_in_month(value: D, weekday: int, occurrence: int) -> D:
    """
    Resolve the nth ``weekday`` (Sunday=0) of ``value``'s month.

    ``occurrence == -1`` means the last one. A requested occurrence that does
    not exist (a 5th Monday in a four-Monday month) clamps to the last
    matching weekday of the same month; it never overflows into the next month.
    """
    if occurrence == LAST_OCCURRENCE:
        return last_weekday_in_month(value, weekday)

    first = value.replace(day=1)
    day = 1 + (weekday - sunday_based_weekday(first)) % 7 + (occurrence - 1) * 7
    if day > last_day_of_month(value.year, value.month):
        return last_weekday_in_month(value, weekday)
    return value.replace(day=day)


class RecurrenceCalculator:
    """Calculates next occurrence dates from recurrence templates."""

    def next_occurrence(self, template: RecurrenceTemplateBase, base_date: D) -> D:
        """
        Calculate the next occurrence after ``base_date``.

        Args:
            template: Recurrence template (intervals, pinned day, mode)
            base_date: Date to calculate from

        Returns:
            The next occurrence, of the same type as ``base_date``

        Raises:
            InvalidIntervalError: If any interval value is not positive
        """
        self.validate_intervals(template.intervals)

        result = base_date
        for interval in template.intervals:
            result = self.apply_interval(result, interval, template.day_of_month)

        if isinstance(template.mode, WeekdayOccurrenceMode):
            # Intervals only choose the month; the weekday rule picks the day.
            return nth_weekday_in_month(
                result, template.mode.weekday, template.mode.occurrence_in_month
            )
        return result

    @staticmethod
    def validate_intervals(intervals: Iterable[Interval]) -> None:
        """Raise InvalidIntervalError on the first non-positive interval."""
        for interval in intervals:
            if interval.value <= 0:
                raise InvalidIntervalError(interval.value, str(interval.unit))

    @staticmethod
    def apply_interval(value: D, interval: Interval, day_of_month: Optional[int] = None) -> D:
        """Apply one interval to a date."""
        if interval.unit == IntervalUnit.DAYS:
            return value + timedelta(days=interval.value)
        if interval.unit == IntervalUnit.WEEKS:
            return value + timedelta(weeks=interval.value)
        if interval.unit == IntervalUnit.MONTHS:
            return add_months(value, interval.value, day_of_month)
        if interval.unit == IntervalUnit.YEARS:
            return add_years(value, interval.value)
        raise InvalidIntervalError(interval.value, str(interval.unit))
