"""Services layer - Business logic"""

from .date_range_service import quick_range
from .duration import calculate_duration, format_minutes_to_hours
from .export_service import ExportService, ExportStatus

__all__ = ["quick_range", "calculate_duration", "format_minutes_to_hours", "ExportService", "ExportStatus"]
