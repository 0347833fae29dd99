"""
Row transformer - projects raw time entries into export rows.

Entries given here already carry local times. Unknown users and activities
still produce rows ("Unknown User" / the raw activity id) so that broken
references show up in the report instead of disappearing.

Open entries count as zero minutes in every numeric total. Sums over
duration_minutes / total_minutes therefore undercount open entries.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from timesheet.domain.models import Activity, ExportDetailedRow, ExportSummaryRow, TimeEntry
from timesheet.services.duration import IN_PROGRESS, Duration, calculate_duration
from timesheet.services.timezone_service import format_export_date, format_time_for_display

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"


def resolve_user_name(user_id: str, users: Mapping[str, str]) -> str:
    return users.get(user_id) or UNKNOWN_USER


def activity_labels(activities: Sequence[Activity]) -> Dict[str, str]:
    """Map activity id -> label"""
    return {activity.id: activity.label for activity in activities}


def resolve_activity_label(activity_id: str, labels: Mapping[str, str]) -> str:
    # Fall back to the raw id, not a placeholder
    return labels.get(activity_id) or activity_id


def entry_minutes(entry: TimeEntry) -> int:
    """Duration in minutes, 0 for open entries"""
    result = calculate_duration(entry.start_time, entry.end_time)
    return result.minutes if isinstance(result, Duration) else 0


def transform_to_detailed_rows(entries: Iterable[TimeEntry],
                               users: Mapping[str, str],
                               activities: Sequence[Activity]) -> List[ExportDetailedRow]:
    """
    One row per entry, sorted by date, user display name, then start time.

    Args:
        entries: Time entries with local times
        users: uid -> display name
        activities: Known activities

    Returns:
        Detailed rows; the input is left untouched
    """
    labels = activity_labels(activities)

    def sort_key(entry: TimeEntry) -> Tuple[str, str, str]:
        return entry.date, resolve_user_name(entry.user_id, users), entry.start_time

    rows: List[ExportDetailedRow] = []
    for entry in sorted(entries, key=sort_key):
        result = calculate_duration(entry.start_time, entry.end_time)
        if isinstance(result, Duration):
            end_time = format_time_for_display(entry.end_time)
            duration, minutes = result.label, result.minutes
        else:
            end_time, duration, minutes = IN_PROGRESS, IN_PROGRESS, 0

        rows.append(ExportDetailedRow(
            date=format_export_date(entry.date),
            user_name=resolve_user_name(entry.user_id, users),
            activity=resolve_activity_label(entry.activity, labels),
            start_time=format_time_for_display(entry.start_time),
            end_time=end_time,
            duration=duration,
            duration_minutes=minutes,
            notes=entry.notes or "",
        ))
    return rows


def format_total_hours(total_minutes: int) -> str:
    """Summary total label; must match format_minutes_to_hours for every input"""
    hours, minutes = divmod(total_minutes, 60)
    if not hours:
        return f"{minutes}m"
    return f"{hours}h {minutes}m" if minutes else f"{hours}h"


def transform_to_summary_rows(entries: Iterable[TimeEntry],
                              users: Mapping[str, str],
                              activities: Sequence[Activity]) -> List[ExportSummaryRow]:
    """
    One row per (user, day) with totals and a per-activity breakdown.

    The breakdown is keyed by activity label. Rows are sorted by user display
    name, then by date.
    """
    labels = activity_labels(activities)
    groups: Dict[Tuple[str, str], List[TimeEntry]] = defaultdict(list)
    for entry in entries:
        groups[(entry.user_id, entry.date)].append(entry)

    keyed_rows = []
    for (user_id, date), bucket in groups.items():
        breakdown: Dict[str, int] = {}
        total = 0
        for entry in bucket:
            minutes = entry_minutes(entry)
            label = resolve_activity_label(entry.activity, labels)
            breakdown[label] = breakdown.get(label, 0) + minutes
            total += minutes

        user_name = resolve_user_name(user_id, users)
        row = ExportSummaryRow(
            user_name=user_name,
            date=format_export_date(date),
            total_minutes=total,
            total_hours=format_total_hours(total),
            entry_count=len(bucket),
            activity_breakdown=breakdown,
        )
        keyed_rows.append(((user_name, date), row))

    keyed_rows.sort(key=lambda item: item[0])
    logger.debug(f"Summarized {sum(len(b) for b in groups.values())} entries into {len(keyed_rows)} rows")
    return [row for _, row in keyed_rows]


def total_detailed_minutes(rows: Iterable[ExportDetailedRow]) -> int:
    return sum(row.duration_minutes for row in rows)


def total_summary_minutes(rows: Iterable[ExportSummaryRow]) -> int:
    return sum(row.total_minutes for row in rows)
