"""Domain layer - Pure business entities and errors"""

from .errors import InvalidInputError, NoDataError, SerializationError, ExportError, TimesheetError
from .models import (
    Activity,
    AppSettings,
    AppUser,
    ExportArtifact,
    ExportConfig,
    ExportDetailedRow,
    ExportFormat,
    ExportMetadata,
    ExportSummaryRow,
    ExportType,
    TimeEntry,
    UserRole,
)

__all__ = [
    "Activity", "AppSettings", "AppUser", "ExportArtifact", "ExportConfig",
    "ExportDetailedRow", "ExportFormat", "ExportMetadata", "ExportSummaryRow",
    "ExportType", "TimeEntry", "UserRole",
    "TimesheetError", "InvalidInputError", "ExportError", "NoDataError", "SerializationError",
]
