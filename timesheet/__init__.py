"""Timesheet export - timezone-aware time entry reporting (CSV / PDF)"""

__version__ = "0.1.0"
