"""
CSV serializer for timesheet exports.

The layout is fixed: header, one line per row, a blank line, then unquoted
"Total Hours", "Generated" and "Timezone" lines in that order. Lines are
joined with "\\n" and there is no trailing newline.

Fields are quoted only when they contain a comma, a double quote or a
newline. The footer lines are written raw (the generation stamp contains a
comma), which is why the csv module is not used here.
"""

from typing import List, Sequence

from timesheet.domain.models import Activity, ExportDetailedRow, ExportMetadata, ExportSummaryRow
from timesheet.services.duration import format_minutes_to_hours
from timesheet.services.export.transformer import total_detailed_minutes, total_summary_minutes

DETAILED_HEADERS = ["Date", "User", "Activity", "Start Time", "End Time", "Duration", "Notes"]
SUMMARY_HEADERS = ["User", "Date", "Total Hours", "Entries"]

MEDIA_TYPE = "text/csv;charset=utf-8"


def escape_csv(value: str) -> str:
    if not value:
        return ""
    if "," in value or '"' in value or "\n" in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def _footer(total_minutes: int, metadata: ExportMetadata) -> List[str]:
    return [
        "",
        f"Total Hours,{format_minutes_to_hours(total_minutes)}",
        f"Generated,{metadata.generated_at}",
        f"Timezone,{metadata.timezone}",
    ]


def generate_detailed_csv(rows: Sequence[ExportDetailedRow], metadata: ExportMetadata) -> str:
    """Render detailed rows; notes are written in full"""
    lines = [",".join(DETAILED_HEADERS)]
    for row in rows:
        values = [row.date, row.user_name, row.activity, row.start_time,
                  row.end_time, row.duration, row.notes]
        lines.append(",".join(escape_csv(v) for v in values))

    lines.extend(_footer(total_detailed_minutes(rows), metadata))
    return "\n".join(lines)


def generate_summary_csv(rows: Sequence[ExportSummaryRow],
                         activities: Sequence[Activity],
                         metadata: ExportMetadata) -> str:
    """Render summary rows with one column per known activity label"""
    labels = [activity.label for activity in activities]
    lines = [",".join(escape_csv(h) for h in SUMMARY_HEADERS + labels)]

    for row in rows:
        activity_values = [
            format_minutes_to_hours(row.activity_breakdown[label])
            if row.activity_breakdown.get(label) else ""
            for label in labels
        ]
        values = [escape_csv(row.user_name), escape_csv(row.date),
                  escape_csv(row.total_hours), str(row.entry_count)]
        values.extend(escape_csv(v) for v in activity_values)
        lines.append(",".join(values))

    lines.extend(_footer(total_summary_minutes(rows), metadata))
    return "\n".join(lines)
