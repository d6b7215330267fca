"""Calendar arithmetic shared by budgeting, goals, forecasting and analytics."""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, time, timedelta
from typing import Iterator

CURRENT_MONTH = "currentMonth"
LAST_MONTH = "lastMonth"
CURRENT_QUARTER = "currentQuarter"
LAST_QUARTER = "lastQuarter"
CURRENT_YEAR = "currentYear"
LAST_YEAR = "lastYear"
PERIODS = (CURRENT_MONTH, LAST_MONTH, CURRENT_QUARTER, LAST_QUARTER, CURRENT_YEAR, LAST_YEAR)
LONG_PERIODS = (CURRENT_YEAR, LAST_YEAR)


def add_months(value: date, months: int) -> date:
    """Shift *value* by whole months, clamping the day to the target month length."""

    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def month_start(value: date) -> date:
    return value.replace(day=1)


def month_end(value: date) -> date:
    return value.replace(day=monthrange(value.year, value.month)[1])


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def _quarter_start(value: date) -> date:
    return date(value.year, 3 * ((value.month - 1) // 3) + 1, 1)


def date_range_for_period(period: str, reference_date: date) -> tuple[date, date]:
    """Return inclusive ``(start, end)`` dates for a named reporting period.

    Unknown period names fall back to the current month.
    """

    if period == LAST_MONTH:
        ref = add_months(reference_date, -1)
        return month_start(ref), month_end(ref)
    if period == CURRENT_QUARTER:
        start = _quarter_start(reference_date)
        return start, month_end(add_months(start, 2))
    if period == LAST_QUARTER:
        start = _quarter_start(add_months(reference_date, -3))
        return start, month_end(add_months(start, 2))
    if period == CURRENT_YEAR:
        return date(reference_date.year, 1, 1), date(reference_date.year, 12, 31)
    if period == LAST_YEAR:
        return date(reference_date.year - 1, 1, 1), date(reference_date.year - 1, 12, 31)
    return month_start(reference_date), month_end(reference_date)


def datetime_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    return datetime.combine(start, time.min), datetime.combine(end, time.max)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def iter_months(start: date, end: date) -> Iterator[date]:
    current = month_start(start)
    while current <= end:
        yield current
        current = add_months(current, 1)
