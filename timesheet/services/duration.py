"""
Duration calculation for time entries.

Intervals cross midnight at most once: an end before the start adds one day.
Intervals of 24h or more are not representable.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from timesheet.services.timezone_service import parse_time

MINUTES_PER_DAY = 24 * 60
IN_PROGRESS = "In Progress"


class Open(Enum):
    """Marker for an entry without an end time"""
    OPEN = "open"


@dataclass(frozen=True)
class Duration:
    minutes: int
    label: str


DurationResult = Union[Duration, Open]


def format_minutes_to_hours(minutes: int) -> str:
    """
    Format a minute count as "1h 30m", "2h" or "45m".

    Zero renders as "0m".
    """
    h = minutes // 60
    m = minutes % 60
    if h == 0:
        return f"{m}m"
    if m == 0:
        return f"{h}h"
    return f"{h}h {m}m"


def minutes_between(start_time: str, end_time: str) -> int:
    """Minutes from start to end, wrapping once past midnight"""
    start_h, start_m = parse_time(start_time)
    end_h, end_m = parse_time(end_time)

    total = (end_h * 60 + end_m) - (start_h * 60 + start_m)
    if total < 0:
        total += MINUTES_PER_DAY  # overnight
    return total


def calculate_duration(start_time: str, end_time: Optional[str]) -> DurationResult:
    """
    Duration of an entry, or Open.OPEN when it has no end time yet.

    Callers must not do arithmetic on the open marker.
    """
    if not end_time:
        parse_time(start_time)
        return Open.OPEN
    minutes = minutes_between(start_time, end_time)
    return Duration(minutes=minutes, label=format_minutes_to_hours(minutes))


def duration_label(start_time: str, end_time: Optional[str]) -> str:
    """Human label for a duration; "In Progress" for open entries"""
    result = calculate_duration(start_time, end_time)
    if result is Open.OPEN:
        return IN_PROGRESS
    return result.label
