"""
Timezone Service - conversion between local wall-clock times and the
canonical (UTC anchored) "HH:mm" values kept in the store.

Architecture Decision: Explicit zone parameter
Every function receives the IANA zone from its caller. Nothing here reads the
host clock or zone unless a caller omits the optional `now` argument of the
"current" helpers.

Only the time-of-day survives a conversion. When the shift crosses midnight
the adjacent calendar date is discarded, so stored times are date-naive
relative to zone shifts.
"""

import datetime
import re
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timesheet.domain.errors import InvalidInputError

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

UTC = datetime.timezone.utc


def parse_time(value: str) -> Tuple[int, int]:
    """
    Parse a zero-padded 24h "HH:mm" string.

    Raises:
        InvalidInputError: if the value is not a valid clock time
    """
    match = _TIME_RE.match(value or "")
    if not match:
        raise InvalidInputError(f"Invalid time {value!r}, expected HH:mm")
    return int(match.group(1)), int(match.group(2))


def parse_date(value: str) -> datetime.date:
    """Parse a "YYYY-MM-DD" calendar date"""
    if not _DATE_RE.match(value or ""):
        raise InvalidInputError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    try:
        return datetime.date.fromisoformat(value)
    except ValueError as e:
        raise InvalidInputError(f"Invalid date {value!r}: {e}") from e


def resolve_zone(zone: str) -> ZoneInfo:
    """Look up an IANA timezone identifier"""
    if not zone:
        raise InvalidInputError("Timezone identifier must not be empty")
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidInputError(f"Unknown timezone {zone!r}") from e


def _combine(date: str, time_value: str, tz: datetime.tzinfo) -> datetime.datetime:
    hour, minute = parse_time(time_value)
    return datetime.datetime.combine(parse_date(date), datetime.time(hour, minute), tzinfo=tz)


def to_canonical(date: str, local_time: str, zone: str) -> str:
    """
    Convert a local wall-clock time to its canonical UTC "HH:mm".

    Args:
        date: Calendar date of the entry (YYYY-MM-DD), needed for the zone offset
        local_time: Wall-clock time in `zone`
        zone: IANA timezone identifier

    Returns:
        The UTC clock time; the UTC calendar date is dropped
    """
    local = _combine(date, local_time, resolve_zone(zone))
    return local.astimezone(UTC).strftime("%H:%M")


def to_local(date: str, canonical_time: str, zone: str) -> str:
    """Convert a canonical UTC "HH:mm" back to wall-clock time in `zone`"""
    tz = resolve_zone(zone)
    utc = _combine(date, canonical_time, UTC)
    return utc.astimezone(tz).strftime("%H:%M")


def _now_in(zone: str, now: Optional[datetime.datetime]) -> datetime.datetime:
    tz = resolve_zone(zone)
    if now is None:
        now = datetime.datetime.now(UTC)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(tz)


def current_local_date(zone: str, now: Optional[datetime.datetime] = None) -> str:
    """Today's date (YYYY-MM-DD) in `zone`. Naive `now` values are taken as UTC."""
    return _now_in(zone, now).strftime("%Y-%m-%d")


def current_local_time(zone: str, now: Optional[datetime.datetime] = None) -> str:
    """Current wall-clock time (HH:mm) in `zone`"""
    return _now_in(zone, now).strftime("%H:%M")


def timezone_abbreviation(zone: str, at: Optional[datetime.datetime] = None) -> str:
    """Short zone name at a given instant, e.g. "EST" or "CEST" """
    return _now_in(zone, at).strftime("%Z")


def timezone_name(zone: str) -> str:
    """Readable zone name ("America/New_York" -> "America/New York")"""
    return resolve_zone(zone).key.replace("_", " ")


def _format_clock(hour: int, minute: int) -> str:
    period = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {period}"


def format_time_for_display(time_value: str) -> str:
    """Format "13:30" as "1:30 PM" """
    return _format_clock(*parse_time(time_value))


def format_date_for_display(date: str) -> str:
    """Format "2024-01-15" as "Monday, January 15, 2024" """
    d = parse_date(date)
    return f"{d.strftime('%A, %B')} {d.day}, {d.year}"


def format_export_date(date: str) -> str:
    """Format "2024-01-15" as "Jan 15, 2024" """
    d = parse_date(date)
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def format_generated_at(now: datetime.datetime, zone: str) -> str:
    """Generation stamp for export headers, e.g. "Jan 15, 2024 9:05 AM" """
    local = _now_in(zone, now)
    return f"{local.strftime('%b')} {local.day}, {local.year} {_format_clock(local.hour, local.minute)}"
