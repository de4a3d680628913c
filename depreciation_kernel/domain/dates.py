"""Calendar helpers for monthly depreciation periods."""

from __future__ import annotations

import calendar
from datetime import date, timedelta


def add_months(start: date, months: int) -> date:
    """
    Move ``start`` by whole calendar months.

    The day is clamped to the last day of the target month, so
    ``add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)``.
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_in_month(d: date) -> int:
    return calendar.monthrange(d.year, d.month)[1]


def month_bounds(d: date) -> tuple[date, date]:
    """First and last day of the calendar month containing ``d``."""
    return d.replace(day=1), d.replace(day=days_in_month(d))


def period_window(acquisition_date: date, period_number: int) -> tuple[date, date]:
    """
    Start and end date of the ``period_number``-th (1-based) month of life.

    Preconditions:
        - ``period_number`` >= 1.
    Postconditions:
        - start = acquisition + (n-1) months, end = acquisition + n months - 1 day.
    """
    start = add_months(acquisition_date, period_number - 1)
    end = add_months(acquisition_date, period_number) - timedelta(days=1)
    return start, end


def period_key(d: date) -> str:
    """Accounting period identifier (``YYYY-MM``) for a date."""
    return f"{d.year:04d}-{d.month:02d}"


def months_elapsed(start: date, end: date) -> int:
    """Whole months from ``start`` to ``end`` (0 when ``end`` precedes ``start``)."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day and add_months(start, months) > end:
        months -= 1
    return max(0, months)
