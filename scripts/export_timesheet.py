"""
Script to export a timesheet (CSV or PDF) based on a YAML configuration.

Example config:

    format: csv
    type: summary
    start_date: 2026-01-01
    end_date: 2026-01-31
    user_ids: [jane]
    activity_ids: []
"""

import asyncio
import logging
import sys
from pathlib import Path

import yaml

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from timesheet.domain.models import ExportConfig
from timesheet.infra.config import get_settings
from timesheet.infra.db import init_db
from timesheet.infra.downloads import FileDownloadSink
from timesheet.infra.repository import ActivityRepository, TimeEntryRepository, UserRepository
from timesheet.services.export_service import ExportService


async def main():
    if len(sys.argv) < 2:
        print("Usage: python export_timesheet.py <config_file.yaml>")
        sys.exit(1)

    config_path = Path(sys.argv[1])
    if not config_path.exists():
        print(f"Error: Config file '{config_path}' not found.")
        sys.exit(1)

    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print(f"Loading configuration from {config_path}...")
    with open(config_path, 'r', encoding='utf-8') as f:
        config_data = yaml.safe_load(f) or {}

    # YAML turns unquoted dates into date objects
    for key in ("start_date", "end_date"):
        if key in config_data:
            config_data[key] = str(config_data[key])

    try:
        config = ExportConfig(**config_data)
    except ValueError as e:
        print(f"Error parsing configuration: {e}")
        sys.exit(1)

    await init_db(settings.get_db_url())
    prefs = settings.preferences
    users = await UserRepository().lookup()
    activities = await ActivityRepository().get_all()

    sink = FileDownloadSink(settings.get_export_dir())
    service = ExportService(
        TimeEntryRepository(timezone=prefs.timezone),
        sink,
        timezone=prefs.timezone,
        page_size=prefs.pdf_page_size,
        compress=prefs.pdf_compression,
    )

    print(f"Exporting {config.type.value} {config.format.value} for {config.start_date} to {config.end_date}")
    artifact = await service.export_data(config, users, activities)
    if artifact is None:
        print(f"Export failed: {service.export_error}")
        sys.exit(1)

    print(f"Report successfully saved to: {sink.last_path.absolute()}")


if __name__ == "__main__":
    asyncio.run(main())
