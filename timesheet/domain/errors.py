"""
Error taxonomy for the timesheet core.

InvalidInputError signals a programming error (bad date/time/zone reaching a
pure function). ExportError subclasses are the outcomes an export attempt can
end in; the export service turns them into a message for the caller.
"""


class TimesheetError(Exception):
    """Base class for all timesheet errors"""


class InvalidInputError(TimesheetError, ValueError):
    """Malformed date, time or timezone identifier"""


class ExportError(TimesheetError):
    """Base class for export failures"""


class NoDataError(ExportError):
    """The filtered selection contains no time entries"""

    def __init__(self, message: str = "No time entries found for the selected date range."):
        super().__init__(message)


class SerializationError(ExportError):
    """The CSV or PDF renderer failed"""
