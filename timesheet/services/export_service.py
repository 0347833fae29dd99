"""
Export Service - orchestrates fetch, filter, transform, serialize and download.

Architecture Decision: Collaborator protocols
Fetching entries and persisting the finished file are outside the export
core. The service talks to them through two narrow protocols (EntrySource,
DownloadSink) so tests and the SQLite store plug in the same way.

State: IDLE -> EXPORTING -> IDLE. A failed attempt leaves its message in
`export_error` until the next attempt or dismiss_error(). The service does
not refuse concurrent calls; callers disable their trigger while exporting.
"""

import datetime
import logging
import re
from enum import Enum
from typing import Callable, List, Mapping, Optional, Protocol, Sequence

from timesheet.domain.errors import NoDataError
from timesheet.domain.models import (
    Activity,
    ExportArtifact,
    ExportConfig,
    ExportFormat,
    ExportMetadata,
    ExportType,
    TimeEntry,
)
from timesheet.services.export import csv_exporter, pdf_exporter
from timesheet.services.export.transformer import (
    activity_labels,
    resolve_activity_label,
    resolve_user_name,
    transform_to_detailed_rows,
    transform_to_summary_rows,
)
from timesheet.services.timezone_service import format_generated_at, resolve_zone, timezone_abbreviation

logger = logging.getLogger(__name__)

ALL_USERS = "All Users"
SCOPE_SEPARATOR = " | "
GENERIC_FAILURE = "Failed to export data"


class EntrySource(Protocol):
    async def fetch_entries(self, start_date: str, end_date: str,
                            user_id: Optional[str] = None) -> List[TimeEntry]:
        """All entries dated within [start_date, end_date], local times, any order"""
        ...


class DownloadSink(Protocol):
    def trigger_download(self, content: bytes, filename: str) -> None:
        ...


class ExportStatus(str, Enum):
    IDLE = "idle"
    EXPORTING = "exporting"


def filter_entries(entries: Sequence[TimeEntry], config: ExportConfig) -> List[TimeEntry]:
    """Apply the user filter, then the activity filter. Empty filter sets keep everything."""
    result = list(entries)
    if config.user_ids:
        result = [e for e in result if e.user_id in config.user_ids]
    if config.activity_ids:
        result = [e for e in result if e.activity in config.activity_ids]
    return result


def describe_user_scope(config: ExportConfig, users: Mapping[str, str]) -> str:
    if not config.user_ids:
        return ALL_USERS
    if len(config.user_ids) == 1:
        return resolve_user_name(next(iter(config.user_ids)), users)
    return f"{len(config.user_ids)} users"


def describe_scope(config: ExportConfig, users: Mapping[str, str],
                   activities: Sequence[Activity]) -> str:
    """
    Human description of the export filters.

    Examples: "All Users", "Jane Smith", "2 users | Meeting", "All Users | 3 activities"
    """
    scope = describe_user_scope(config, users)
    if config.activity_ids:
        if len(config.activity_ids) == 1:
            activity_id = next(iter(config.activity_ids))
            activity_scope = resolve_activity_label(activity_id, activity_labels(activities))
        else:
            activity_scope = f"{len(config.activity_ids)} activities"
        scope = f"{scope}{SCOPE_SEPARATOR}{activity_scope}"
    return scope


def slugify(value: str) -> str:
    """Lowercase, whitespace to hyphens, drop characters unsafe in file names"""
    slug = re.sub(r"\s+", "-", value.strip().lower())
    slug = re.sub(r"[^\w-]", "", slug)
    return re.sub(r"-{2,}", "-", slug).strip("-") or "export"


def build_filename(config: ExportConfig, users: Mapping[str, str]) -> str:
    """e.g. timesheet-detailed-jane-smith-2024-01-01-to-2024-01-31.csv"""
    scope_token = "all" if not config.user_ids else slugify(describe_user_scope(config, users))
    base = f"timesheet-{config.type.value}-{scope_token}-{config.start_date}-to-{config.end_date}"
    return f"{base}.{config.format.value}"


def build_metadata(config: ExportConfig, users: Mapping[str, str], activities: Sequence[Activity],
                   zone: str, now: datetime.datetime) -> ExportMetadata:
    return ExportMetadata(
        date_range=f"{config.start_date} to {config.end_date}",
        generated_at=format_generated_at(now, zone),
        timezone=timezone_abbreviation(zone, now),
        scope=describe_scope(config, users, activities),
    )


def render_export(config: ExportConfig, entries: Sequence[TimeEntry], users: Mapping[str, str],
                  activities: Sequence[Activity], metadata: ExportMetadata,
                  page_size: str = "a4", compress: bool = True) -> ExportArtifact:
    """
    Filter entries and render them in the requested (type x format).

    Raises:
        NoDataError: when nothing is left after filtering
        SerializationError: when the PDF renderer fails
    """
    selected = filter_entries(entries, config)
    if not selected:
        raise NoDataError()

    if config.type == ExportType.DETAILED:
        detailed = transform_to_detailed_rows(selected, users, activities)
        if config.format == ExportFormat.CSV:
            content = csv_exporter.generate_detailed_csv(detailed, metadata).encode("utf-8")
        else:
            content = pdf_exporter.generate_detailed_pdf(detailed, metadata, page_size, compress)
    else:
        summary = transform_to_summary_rows(selected, users, activities)
        if config.format == ExportFormat.CSV:
            content = csv_exporter.generate_summary_csv(summary, activities, metadata).encode("utf-8")
        else:
            content = pdf_exporter.generate_summary_pdf(summary, activities, metadata, page_size, compress)

    media_type = csv_exporter.MEDIA_TYPE if config.format == ExportFormat.CSV else pdf_exporter.MEDIA_TYPE
    return ExportArtifact(content=content, filename=build_filename(config, users), media_type=media_type)


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class ExportService:
    """
    Runs one export at a time from a given call site and keeps the last error.
    """

    def __init__(self, entry_source: EntrySource, download_sink: DownloadSink,
                 timezone: str = "UTC", page_size: str = "a4", compress: bool = True,
                 clock: Callable[[], datetime.datetime] = _utc_now):
        """
        Args:
            entry_source: Fetches entries for a date range
            download_sink: Receives the finished file
            timezone: IANA zone for the generation stamp and zone abbreviation
            page_size: PDF page size ('a4' or 'letter')
            compress: Compress PDF page streams
            clock: Source of the generation timestamp
        """
        resolve_zone(timezone)
        self.entry_source = entry_source
        self.download_sink = download_sink
        self.timezone = timezone
        self.page_size = page_size
        self.compress = compress
        self.clock = clock

        self.status = ExportStatus.IDLE
        self.export_error: Optional[str] = None

    @property
    def is_exporting(self) -> bool:
        return self.status == ExportStatus.EXPORTING

    def dismiss_error(self) -> None:
        self.export_error = None

    async def export_data(self, config: ExportConfig, users: Mapping[str, str],
                          activities: Sequence[Activity]) -> Optional[ExportArtifact]:
        """
        Fetch, render and hand over one export.

        Returns:
            The artifact given to the download sink, or None when the attempt
            failed (see export_error)
        """
        self.status = ExportStatus.EXPORTING
        self.export_error = None

        try:
            single_user = next(iter(config.user_ids)) if len(config.user_ids) == 1 else None
            entries = await self.entry_source.fetch_entries(config.start_date, config.end_date, single_user)

            metadata = build_metadata(config, users, activities, self.timezone, self.clock())
            artifact = render_export(config, entries, users, activities, metadata,
                                     page_size=self.page_size, compress=self.compress)

            self.download_sink.trigger_download(artifact.content, artifact.filename)
            logger.info(f"Exported {artifact.filename} ({len(artifact.content)} bytes)")
            return artifact
        except NoDataError as e:
            logger.warning(f"Nothing to export for {config.start_date}..{config.end_date}")
            self.export_error = str(e)
        except Exception as e:
            logger.exception("Export failed")
            self.export_error = str(e) or GENERIC_FAILURE
        finally:
            self.status = ExportStatus.IDLE
        return None
