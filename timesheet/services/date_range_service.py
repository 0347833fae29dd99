"""
Quick date range selection for exports ("this week", "last month", ...).
"""

import calendar
import datetime
from typing import Tuple

from timesheet.domain.errors import InvalidInputError

QUICK_RANGES = ("today", "this_week", "this_month", "last_month", "last_30")


def _iso(d: datetime.date) -> str:
    return d.strftime("%Y-%m-%d")


def _month_bounds(year: int, month: int) -> Tuple[datetime.date, datetime.date]:
    _, last_day = calendar.monthrange(year, month)
    return datetime.date(year, month, 1), datetime.date(year, month, last_day)


def quick_range(kind: str, today: datetime.date) -> Tuple[str, str]:
    """
    Resolve a named range to inclusive (start, end) dates.

    Args:
        kind: One of QUICK_RANGES
        today: The caller's local date

    Returns:
        (start_date, end_date) as YYYY-MM-DD strings
    """
    if kind == "today":
        start, end = today, today
    elif kind == "this_week":
        # Weeks start on Monday
        start = today - datetime.timedelta(days=today.weekday())
        end = start + datetime.timedelta(days=6)
    elif kind == "this_month":
        start, end = _month_bounds(today.year, today.month)
    elif kind == "last_month":
        first_of_month = today.replace(day=1)
        previous = first_of_month - datetime.timedelta(days=1)
        start, end = _month_bounds(previous.year, previous.month)
    elif kind == "last_30":
        start, end = today - datetime.timedelta(days=30), today
    else:
        raise InvalidInputError(f"Unknown date range {kind!r}, expected one of {', '.join(QUICK_RANGES)}")
    return _iso(start), _iso(end)
