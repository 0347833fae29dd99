"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
Entries arrive from the store and from YAML export configurations. Pydantic
validates the fixed-width date/time formats the export pipeline relies on
(sorting on "HH:mm" strings is only correct when they are zero padded).
"""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

ClockTime = Annotated[str, StringConstraints(pattern=TIME_PATTERN)]


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class ExportFormat(str, Enum):
    CSV = "csv"
    PDF = "pdf"


class ExportType(str, Enum):
    DETAILED = "detailed"
    SUMMARY = "summary"


def activity_id_from_label(label: str) -> str:
    """Derive an activity identifier from its label ("Client Call" -> "client-call")"""
    return re.sub(r"\s+", "-", label.strip().lower())


class AppUser(BaseModel):
    """
    A user of the timesheet.

    Inside the export core only the uid -> display name mapping is used.
    """
    model_config = ConfigDict(from_attributes=True)

    uid: str = Field(..., min_length=1)
    email: str
    display_name: str = ""
    role: UserRole = UserRole.USER
    created_at: datetime = Field(default_factory=datetime.now)
    created_by: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Activity(BaseModel):
    """
    A labeled, colored category that time entries reference by id.

    Examples: "Meeting", "Development"
    """
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1, max_length=100)
    color: str = Field(default="#10B981", pattern=r"^#[0-9A-Fa-f]{6}$")

    @classmethod
    def from_label(cls, label: str, color: str = "#10B981") -> "Activity":
        return cls(id=activity_id_from_label(label), label=label, color=color)


class TimeEntry(BaseModel):
    """
    One user's activity interval on one calendar day.

    Times are "HH:mm". Whether they are local or canonical (UTC) depends on
    which side of the repository the entry is: the store keeps canonical
    times, everything handed to the export pipeline is local.
    An entry without end_time is open (still in progress).
    """
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    user_id: str
    date: str = Field(..., pattern=DATE_PATTERN)
    activity: str
    start_time: ClockTime
    end_time: Optional[ClockTime] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_open(self) -> bool:
        return self.end_time is None


class AppSettings(BaseModel):
    """Application-wide switches managed by administrators."""
    model_config = ConfigDict(from_attributes=True)

    allow_user_edits: bool = True
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


class ExportConfig(BaseModel):
    """
    One export request.

    Empty user_ids / activity_ids mean "no restriction".
    """
    model_config = ConfigDict(frozen=True)

    format: ExportFormat
    type: ExportType
    start_date: str = Field(..., pattern=DATE_PATTERN)
    end_date: str = Field(..., pattern=DATE_PATTERN)
    user_ids: FrozenSet[str] = Field(default_factory=frozenset)
    activity_ids: FrozenSet[str] = Field(default_factory=frozenset)

    @model_validator(mode="after")
    def _check_range(self) -> "ExportConfig":
        if self.start_date > self.end_date:
            raise ValueError(f"start_date {self.start_date} is after end_date {self.end_date}")
        return self


class ExportDetailedRow(BaseModel):
    date: str
    user_name: str
    activity: str
    start_time: str
    end_time: str
    duration: str
    duration_minutes: int
    notes: str = ""


class ExportSummaryRow(BaseModel):
    user_name: str
    date: str
    total_minutes: int = 0
    total_hours: str = ""
    entry_count: int = 0
    activity_breakdown: Dict[str, int] = Field(default_factory=dict)


class ExportMetadata(BaseModel):
    date_range: str
    generated_at: str
    timezone: str
    scope: str


class ExportArtifact(BaseModel):
    """A rendered export, ready to be handed to a download sink."""
    content: bytes
    filename: str
    media_type: str
