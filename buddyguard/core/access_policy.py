"""
Role-based access policy.

Pure decision logic: which destinations and dashboard panels a role sees,
which status transitions it may perform, and which note field it owns.
Every role dispatch ends in `assert_never` so a new Role member is flagged
by the type checker at each of these sites.
"""

from __future__ import annotations

from typing import Optional, assert_never

from buddyguard.schemas.incident import (
    DashboardPanel,
    Destination,
    Incident,
    NoteField,
    Role,
    Status,
)


def visible_nav(role: Role) -> tuple[Destination, ...]:
    """Navigation destinations for a role, in display order."""
    match role:
        case Role.ANONYMOUS:
            return (Destination.SUBMIT_REPORT,)
        case Role.TEACHER | Role.GUIDANCE:
            return (Destination.DASHBOARD, Destination.SAFETY_LOG, Destination.SUBMIT_REPORT)
        case Role.ADMIN:
            return (
                Destination.DASHBOARD,
                Destination.SAFETY_LOG,
                Destination.SUBMIT_REPORT,
                Destination.USERS,
            )
        case _:
            assert_never(role)


def can_access(role: Role, destination: Destination) -> bool:
    return destination in visible_nav(role)


def landing_destination(role: Role) -> Destination:
    """Where a freshly opened session starts."""
    if role is Role.ANONYMOUS:
        return Destination.SUBMIT_REPORT
    return Destination.DASHBOARD


def visible_panels(role: Role) -> tuple[DashboardPanel, ...]:
    # statistical charts are for Admin and Guidance only
    match role:
        case Role.ANONYMOUS:
            return ()
        case Role.TEACHER:
            return (DashboardPanel.SUMMARY,)
        case Role.ADMIN | Role.GUIDANCE:
            return (
                DashboardPanel.SUMMARY,
                DashboardPanel.CATEGORY_BREAKDOWN,
                DashboardPanel.GRADE_BREAKDOWN,
            )
        case _:
            assert_never(role)


def allowed_statuses(role: Role) -> frozenset[Status]:
    """Statuses a role may move an incident into, from any current status."""
    match role:
        case Role.ANONYMOUS:
            return frozenset()
        case Role.TEACHER:
            return frozenset({Status.ACTION_TAKEN})
        case Role.GUIDANCE:
            return frozenset({Status.UNDER_COUNSELING, Status.ACTION_TAKEN})
        case Role.ADMIN:
            return frozenset({Status.RESOLVED, Status.UNDER_COUNSELING, Status.ACTION_TAKEN})
        case _:
            assert_never(role)


def can_transition(role: Role, from_status: Status, to_status: Status) -> bool:
    # from_status is accepted for the contract but never restricts: backward moves are allowed
    return to_status in allowed_statuses(role)


def note_field_for(role: Role) -> Optional[NoteField]:
    match role:
        case Role.ADMIN:
            return NoteField.ADMIN_NOTES
        case Role.TEACHER:
            return NoteField.TEACHER_REMARKS
        case Role.GUIDANCE:
            return NoteField.GUIDANCE_NOTES
        case Role.ANONYMOUS:
            return None
        case _:
            assert_never(role)


def visible_note_fields(role: Role) -> frozenset[NoteField]:
    if role is Role.ADMIN:
        return frozenset(NoteField)
    own = note_field_for(role)
    return frozenset({own}) if own is not None else frozenset()


def redact_notes(incident: Incident, role: Role) -> Incident:
    """Copy of the incident with note fields the role may not see blanked out."""
    hidden = set(NoteField) - visible_note_fields(role)
    if not hidden:
        return incident
    return incident.model_copy(update={field.attr: None for field in hidden})


def can_manage_staff(role: Role) -> bool:
    return can_access(role, Destination.USERS)
