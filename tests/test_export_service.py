"""
Tests for the export orchestrator and its pure helpers.
"""

import asyncio
import datetime

import pytest

from timesheet.domain.errors import InvalidInputError
from timesheet.domain.models import ExportConfig, ExportFormat, ExportType, TimeEntry
from timesheet.services.export_service import (
    ExportService,
    ExportStatus,
    build_filename,
    describe_scope,
    filter_entries,
    slugify,
)

FIXED_NOW = datetime.datetime(2024, 1, 15, 14, 5, tzinfo=datetime.timezone.utc)


def _config(**overrides) -> ExportConfig:
    values = dict(format=ExportFormat.CSV, type=ExportType.DETAILED,
                  start_date="2024-01-15", end_date="2024-01-15")
    values.update(overrides)
    return ExportConfig(**values)


class FakeEntrySource:
    def __init__(self, entries, error=None):
        self.entries = entries
        self.error = error
        self.calls = []
        self.status_during_fetch = None
        self.service = None

    async def fetch_entries(self, start_date, end_date, user_id=None):
        self.calls.append((start_date, end_date, user_id))
        if self.service is not None:
            self.status_during_fetch = self.service.status
        if self.error is not None:
            raise self.error
        return [e for e in self.entries
                if start_date <= e.date <= end_date and (user_id is None or e.user_id == user_id)]


class RecordingSink:
    def __init__(self):
        self.downloads = []

    def trigger_download(self, content, filename):
        self.downloads.append((filename, content))


@pytest.fixture
def sink():
    return RecordingSink()


def _service(source, sink, timezone="America/New_York"):
    return ExportService(source, sink, timezone=timezone, clock=lambda: FIXED_NOW)


class TestHelpers:

    def test_filter_by_user_then_activity(self, entries):
        config = _config(user_ids=["user1"], activity_ids=["meeting"])
        assert [e.id for e in filter_entries(entries, config)] == ["entry1"]

    def test_empty_filters_keep_everything(self, entries):
        assert len(filter_entries(entries, _config())) == 3

    @pytest.mark.parametrize("user_ids,activity_ids,expected", [
        ([], [], "All Users"),
        (["user2"], [], "Jane Smith"),
        (["user1", "user2"], [], "2 users"),
        (["user1", "user2"], ["meeting"], "2 users | Meeting"),
        ([], ["meeting", "development"], "All Users | 2 activities"),
        ([], ["retired"], "All Users | retired"),
        (["ghost"], [], "Unknown User"),
    ])
    def test_describe_scope(self, users, activities, user_ids, activity_ids, expected):
        config = _config(user_ids=user_ids, activity_ids=activity_ids)
        assert describe_scope(config, users, activities) == expected

    def test_slugify(self):
        assert slugify("Jane Smith") == "jane-smith"
        assert slugify("  O'Brien,  Pat ") == "obrien-pat"
        assert slugify("2 users") == "2-users"
        assert slugify("!!!") == "export"

    def test_filenames(self, users):
        assert build_filename(_config(), users) == "timesheet-detailed-all-2024-01-15-to-2024-01-15.csv"
        assert build_filename(
            _config(type=ExportType.SUMMARY, format=ExportFormat.PDF, user_ids=["user2"],
                    start_date="2024-01-01", end_date="2024-01-31"),
            users,
        ) == "timesheet-summary-jane-smith-2024-01-01-to-2024-01-31.pdf"

    def test_config_rejects_reversed_range(self):
        with pytest.raises(ValueError):
            _config(start_date="2024-01-31", end_date="2024-01-01")


class TestExportService:

    @pytest.mark.asyncio
    async def test_detailed_csv_export(self, entries, users, activities, sink):
        service = _service(FakeEntrySource(entries), sink)
        artifact = await service.export_data(_config(user_ids=["user1"]), users, activities)

        assert artifact is not None
        assert artifact.media_type == "text/csv;charset=utf-8"
        assert sink.downloads == [(artifact.filename, artifact.content)]
        assert artifact.filename == "timesheet-detailed-john-doe-2024-01-15-to-2024-01-15.csv"

        text = artifact.content.decode("utf-8")
        assert text.split("\n")[-3:] == ["Total Hours,3h", "Generated,Jan 15, 2024 9:05 AM", "Timezone,EST"]
        assert service.status == ExportStatus.IDLE
        assert service.export_error is None

    @pytest.mark.asyncio
    async def test_single_user_scopes_the_fetch(self, entries, users, activities, sink):
        source = FakeEntrySource(entries)
        service = _service(source, sink)

        await service.export_data(_config(user_ids=["user2"]), users, activities)
        await service.export_data(_config(user_ids=["user1", "user2"]), users, activities)

        assert source.calls == [
            ("2024-01-15", "2024-01-15", "user2"),
            ("2024-01-15", "2024-01-15", None),
        ]

    @pytest.mark.asyncio
    async def test_summary_pdf_export(self, entries, users, activities, sink):
        service = _service(FakeEntrySource(entries), sink)
        artifact = await service.export_data(
            _config(format=ExportFormat.PDF, type=ExportType.SUMMARY), users, activities
        )

        assert artifact.media_type == "application/pdf"
        assert artifact.content.startswith(b"%PDF")
        assert artifact.filename.endswith(".pdf")

    @pytest.mark.asyncio
    async def test_no_entries(self, users, activities, sink):
        service = _service(FakeEntrySource([]), sink)
        result = await service.export_data(_config(), users, activities)

        assert result is None
        assert service.export_error == "No time entries found for the selected date range."
        assert service.status == ExportStatus.IDLE
        assert sink.downloads == []

    @pytest.mark.asyncio
    async def test_filters_remove_everything(self, entries, users, activities, sink):
        service = _service(FakeEntrySource(entries), sink)
        result = await service.export_data(_config(activity_ids=["support"]), users, activities)

        assert result is None
        assert service.export_error == "No time entries found for the selected date range."
        assert sink.downloads == []

    @pytest.mark.asyncio
    async def test_source_failure_keeps_message(self, users, activities, sink):
        source = FakeEntrySource([], error=ConnectionError("database is locked"))
        service = _service(source, sink)

        assert await service.export_data(_config(), users, activities) is None
        assert service.export_error == "database is locked"
        assert not service.is_exporting

    @pytest.mark.asyncio
    async def test_failure_without_message_uses_generic(self, users, activities, sink):
        service = _service(FakeEntrySource([], error=RuntimeError()), sink)
        await service.export_data(_config(), users, activities)
        assert service.export_error == "Failed to export data"

    @pytest.mark.asyncio
    async def test_status_while_fetching(self, entries, users, activities, sink):
        source = FakeEntrySource(entries)
        service = _service(source, sink)
        source.service = service

        await service.export_data(_config(), users, activities)

        assert source.status_during_fetch == ExportStatus.EXPORTING
        assert service.status == ExportStatus.IDLE

    @pytest.mark.asyncio
    async def test_error_cleared_on_retry_and_dismiss(self, entries, users, activities, sink):
        source = FakeEntrySource([])
        service = _service(source, sink)

        await service.export_data(_config(), users, activities)
        assert service.export_error is not None
        service.dismiss_error()
        assert service.export_error is None

        await service.export_data(_config(), users, activities)
        source.entries = entries
        assert await service.export_data(_config(), users, activities) is not None
        assert service.export_error is None

    @pytest.mark.asyncio
    async def test_concurrent_exports_both_complete(self, entries, users, activities, sink):
        service = _service(FakeEntrySource(entries), sink)
        results = await asyncio.gather(
            service.export_data(_config(), users, activities),
            service.export_data(_config(format=ExportFormat.PDF), users, activities),
        )
        assert all(r is not None for r in results)
        assert len(sink.downloads) == 2

    def test_invalid_timezone(self, sink):
        with pytest.raises(InvalidInputError):
            ExportService(FakeEntrySource([]), sink, timezone="Nowhere/Special")

    @pytest.mark.asyncio
    async def test_open_entries_exported_as_in_progress(self, users, activities, sink):
        open_entry = TimeEntry(id="open", user_id="user1", date="2024-01-15",
                               activity="meeting", start_time="16:00")
        service = _service(FakeEntrySource([open_entry]), sink)
        artifact = await service.export_data(_config(), users, activities)

        lines = artifact.content.decode("utf-8").split("\n")
        assert lines[1].endswith("4:00 PM,In Progress,In Progress,")
        assert "Total Hours,0m" in lines
