"""Working-day calendar: Monday to Friday, minus a fixed yearly public-holiday table."""

from __future__ import annotations

from datetime import date

# (month, day) pairs observed every year.
PUBLIC_HOLIDAYS: tuple[tuple[int, int], ...] = (
    (1, 1),  # New Year's Day
    (2, 1),  # Liberation Day
    (3, 8),  # International Women's Day
    (7, 1),  # Independence Day
    (8, 15),  # Assumption Day
    (10, 1),  # Patriots' Day
    (12, 25),  # Christmas Day
    (12, 26),  # Boxing Day
)

_HOLIDAY_SET = frozenset(PUBLIC_HOLIDAYS)
_SATURDAY = 5


def is_public_holiday(day: date) -> bool:
    """Return True if the calendar date is in the yearly holiday table."""
    return (day.month, day.day) in _HOLIDAY_SET


def is_working_day(day: date) -> bool:
    """Return True for a weekday that is not a public holiday."""
    return day.weekday() < _SATURDAY and not is_public_holiday(day)


def _count_weekdays(start: date, end: date) -> int:
    """Count Monday-Friday dates in [start, end]. Assumes start <= end."""
    total_days = (end - start).days + 1
    full_weeks, extra_days = divmod(total_days, 7)
    count = full_weeks * 5

    first_weekday = start.weekday()
    for offset in range(extra_days):
        if (first_weekday + offset) % 7 < _SATURDAY:
            count += 1
    return count


def count_working_days(start: date, end: date) -> int:
    """Count working days between start and end, both inclusive.

    Returns 0 when start is after end. Holidays are matched by month and
    day against every year the range spans; a holiday falling on a weekend
    is not deducted twice.
    """
    if start > end:
        return 0

    total = _count_weekdays(start, end)
    for year in range(start.year, end.year + 1):
        for month, day in PUBLIC_HOLIDAYS:
            holiday = date(year, month, day)
            if start <= holiday <= end and holiday.weekday() < _SATURDAY:
                total -= 1
    return total
