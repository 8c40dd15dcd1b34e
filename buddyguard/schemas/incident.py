from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    ANONYMOUS = "Anonymous"
    ADMIN = "Admin"
    TEACHER = "Teacher"
    GUIDANCE = "Guidance"


STAFF_ROLES = (Role.ADMIN, Role.TEACHER, Role.GUIDANCE)


class IncidentType(str, Enum):
    BULLYING = "Bullying"
    LANGUAGE = "Language Misuse"
    DIGITAL = "Digital Misuse"
    ACADEMIC = "Academic Dishonesty"
    VANDALISM = "Vandalism"
    MEDICAL = "Medical/Emergency"
    BEHAVIORAL = "Behavioral Issue"
    OTHER = "Other"


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Status(str, Enum):
    NEW = "New"
    UNDER_REVIEW = "Under Review"
    UNDER_COUNSELING = "Under Counseling"
    ACTION_TAKEN = "Action Taken"
    RESOLVED = "Resolved"
    SEEN = "Seen"
    FORWARDED = "Forwarded"


class NoteField(str, Enum):
    """Per-role note columns on an incident (values are the record field names)."""
    ADMIN_NOTES = "adminNotes"
    TEACHER_REMARKS = "teacherRemarks"
    GUIDANCE_NOTES = "guidanceNotes"

    @property
    def attr(self) -> str:
        """Python attribute name on `Incident`, e.g. adminNotes -> admin_notes."""
        return "".join("_" + c.lower() if c.isupper() else c for c in self.value)


class Destination(str, Enum):
    DASHBOARD = "dashboard"
    SAFETY_LOG = "safety-log"
    SUBMIT_REPORT = "submit-report"
    USERS = "users"


class DashboardPanel(str, Enum):
    SUMMARY = "summary"
    CATEGORY_BREAKDOWN = "category-breakdown"
    GRADE_BREAKDOWN = "grade-breakdown"


class _CamelModel(BaseModel):
    # snake_case in Python, camelCase on the API and in store records
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)


class Incident(_CamelModel):
    id: str
    student_name: str
    grade_section: str
    incident_type: IncidentType = IncidentType.OTHER
    description: str
    date: dt.date
    status: Status = Status.NEW
    severity: Severity = Severity.MEDIUM
    reported_by: Role
    admin_notes: Optional[str] = None
    teacher_remarks: Optional[str] = None
    guidance_notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _date_part(cls, value):
        # timestamp-typed columns come back as "2025-03-01T08:30:00+00:00"
        if isinstance(value, dt.datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10 and value[10] in "T ":
            return value[:10]
        return value

    def note(self, field: NoteField) -> Optional[str]:
        return getattr(self, field.attr)


class IncidentDraft(_CamelModel):
    """What a submitter fills in. Presence of required fields is checked by the workflow."""
    student_name: str = ""
    grade_section: str = ""
    incident_type: IncidentType = IncidentType.OTHER
    description: str = ""
    date: Optional[dt.date] = None
    severity: Optional[Severity] = None   # only set by an accepted suggestion


class Suggestion(_CamelModel):
    suggested_type: str
    severity: Severity = Severity.MEDIUM
    reasoning: str = ""


class StaffProfile(BaseModel):
    # profiles are stored with plain field names, no translation
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str
    role: Role
    active: bool = True


class IncidentListing(BaseModel):
    incidents: list[Incident] = Field(default_factory=list)
    degraded: bool = False   # True when served from cache/fallback after a failed read
