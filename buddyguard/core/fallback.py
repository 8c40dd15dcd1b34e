"""Fixed sample records served when the data store cannot be read."""

from __future__ import annotations

import datetime as dt

from buddyguard.schemas.incident import (
    Incident,
    IncidentType,
    Role,
    Severity,
    StaffProfile,
    Status,
)

SAMPLE_INCIDENTS: tuple[Incident, ...] = (
    Incident(
        id="1",
        student_name="Juan dela Cruz",
        grade_section="Grade 10 - A",
        incident_type=IncidentType.BULLYING,
        description="Physical confrontation in the hallway after lunch.",
        date=dt.date(2025, 2, 10),
        status=Status.NEW,
        reported_by=Role.ANONYMOUS,
        severity=Severity.HIGH,
    ),
    Incident(
        id="2",
        student_name="Mary Anne Valdez",
        grade_section="Grade 8 - C",
        incident_type=IncidentType.ACADEMIC,
        description="Caught using unauthorized materials during Mathematics test.",
        date=dt.date(2025, 2, 11),
        status=Status.UNDER_REVIEW,
        reported_by=Role.TEACHER,
        severity=Severity.MEDIUM,
    ),
    Incident(
        id="3",
        student_name="Pedro Penduko",
        grade_section="Grade 10 - A",
        incident_type=IncidentType.LANGUAGE,
        description="Repeated use of inappropriate language in the cafeteria.",
        date=dt.date(2025, 2, 12),
        status=Status.UNDER_COUNSELING,
        reported_by=Role.TEACHER,
        severity=Severity.LOW,
    ),
    Incident(
        id="4",
        student_name="Maria Clara Santos",
        grade_section="Grade 12 - B",
        incident_type=IncidentType.DIGITAL,
        description="Cyberbullying incident reported via school forum.",
        date=dt.date(2025, 2, 13),
        status=Status.FORWARDED,
        reported_by=Role.ANONYMOUS,
        severity=Severity.HIGH,
    ),
)

SAMPLE_STAFF: tuple[StaffProfile, ...] = (
    StaffProfile(id="u1", name="Admin User", role=Role.ADMIN, active=True),
    StaffProfile(id="u2", name="Mrs. Gatmaitan", role=Role.TEACHER, active=True),
    StaffProfile(id="u3", name="Dr. Dimagiba", role=Role.GUIDANCE, active=True),
)


def sample_incidents() -> list[Incident]:
    # fresh copies so callers can't mutate the module-level samples
    return [incident.model_copy() for incident in SAMPLE_INCIDENTS]


def sample_staff() -> list[StaffProfile]:
    return [profile.model_copy() for profile in SAMPLE_STAFF]
