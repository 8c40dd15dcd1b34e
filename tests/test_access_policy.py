"""Tests for the role-based access policy."""

import datetime as dt

import pytest

from buddyguard.core import access_policy
from buddyguard.schemas.incident import (
    DashboardPanel,
    Destination,
    Incident,
    NoteField,
    Role,
    Status,
)

ALLOWED_ROLES = {
    Destination.DASHBOARD: {Role.ADMIN, Role.TEACHER, Role.GUIDANCE},
    Destination.SAFETY_LOG: {Role.ADMIN, Role.TEACHER, Role.GUIDANCE},
    Destination.SUBMIT_REPORT: {Role.ADMIN, Role.TEACHER, Role.GUIDANCE, Role.ANONYMOUS},
    Destination.USERS: {Role.ADMIN},
}


class TestNavigation:

    @pytest.mark.parametrize("role", list(Role))
    @pytest.mark.parametrize("destination", list(Destination))
    def test_destination_visible_iff_role_allowed(self, role, destination):
        assert (destination in access_policy.visible_nav(role)) == (role in ALLOWED_ROLES[destination])

    def test_nav_order(self):
        assert access_policy.visible_nav(Role.ADMIN) == (
            Destination.DASHBOARD,
            Destination.SAFETY_LOG,
            Destination.SUBMIT_REPORT,
            Destination.USERS,
        )
        assert access_policy.visible_nav(Role.ANONYMOUS) == (Destination.SUBMIT_REPORT,)

    def test_landing(self):
        assert access_policy.landing_destination(Role.ANONYMOUS) is Destination.SUBMIT_REPORT
        for role in (Role.ADMIN, Role.TEACHER, Role.GUIDANCE):
            assert access_policy.landing_destination(role) is Destination.DASHBOARD

    def test_only_admin_manages_staff(self):
        assert access_policy.can_manage_staff(Role.ADMIN)
        assert not access_policy.can_manage_staff(Role.TEACHER)
        assert not access_policy.can_manage_staff(Role.GUIDANCE)
        assert not access_policy.can_manage_staff(Role.ANONYMOUS)


class TestDashboardPanels:

    def test_charts_only_for_admin_and_guidance(self):
        for role in Role:
            panels = access_policy.visible_panels(role)
            charts = DashboardPanel.CATEGORY_BREAKDOWN in panels and DashboardPanel.GRADE_BREAKDOWN in panels
            assert charts == (role in (Role.ADMIN, Role.GUIDANCE))

    def test_teacher_sees_summary(self):
        assert access_policy.visible_panels(Role.TEACHER) == (DashboardPanel.SUMMARY,)

    def test_anonymous_sees_nothing(self):
        assert access_policy.visible_panels(Role.ANONYMOUS) == ()


class TestTransitions:

    @pytest.mark.parametrize("from_status", list(Status))
    def test_admin(self, from_status):
        allowed = {Status.RESOLVED, Status.UNDER_COUNSELING, Status.ACTION_TAKEN}
        for to_status in Status:
            assert access_policy.can_transition(Role.ADMIN, from_status, to_status) == (to_status in allowed)

    @pytest.mark.parametrize("from_status", list(Status))
    def test_guidance(self, from_status):
        allowed = {Status.UNDER_COUNSELING, Status.ACTION_TAKEN}
        for to_status in Status:
            assert access_policy.can_transition(Role.GUIDANCE, from_status, to_status) == (to_status in allowed)

    @pytest.mark.parametrize("from_status", list(Status))
    def test_teacher_only_action_taken(self, from_status):
        for to_status in Status:
            expected = to_status is Status.ACTION_TAKEN
            assert access_policy.can_transition(Role.TEACHER, from_status, to_status) == expected

    def test_anonymous_never(self):
        for from_status in Status:
            for to_status in Status:
                assert not access_policy.can_transition(Role.ANONYMOUS, from_status, to_status)

    def test_backward_moves_allowed(self):
        assert access_policy.can_transition(Role.ADMIN, Status.RESOLVED, Status.ACTION_TAKEN)


class TestNoteFields:

    def test_ownership(self):
        assert access_policy.note_field_for(Role.ADMIN) is NoteField.ADMIN_NOTES
        assert access_policy.note_field_for(Role.TEACHER) is NoteField.TEACHER_REMARKS
        assert access_policy.note_field_for(Role.GUIDANCE) is NoteField.GUIDANCE_NOTES
        assert access_policy.note_field_for(Role.ANONYMOUS) is None

    def test_each_role_owns_a_distinct_field(self):
        owned = [access_policy.note_field_for(r) for r in Role if access_policy.note_field_for(r)]
        assert len(owned) == len(set(owned)) == 3

    def test_visibility(self):
        assert access_policy.visible_note_fields(Role.ADMIN) == frozenset(NoteField)
        assert access_policy.visible_note_fields(Role.GUIDANCE) == {NoteField.GUIDANCE_NOTES}
        assert access_policy.visible_note_fields(Role.ANONYMOUS) == frozenset()

    def test_redact_notes(self):
        incident = Incident(
            id="1",
            student_name="A",
            grade_section="7-B",
            description="desc",
            date=dt.date(2025, 3, 1),
            reported_by=Role.TEACHER,
            admin_notes="admin",
            teacher_remarks="teacher",
            guidance_notes="guidance",
        )
        as_teacher = access_policy.redact_notes(incident, Role.TEACHER)
        assert as_teacher.teacher_remarks == "teacher"
        assert as_teacher.admin_notes is None
        assert as_teacher.guidance_notes is None
        # input incident left untouched
        assert incident.admin_notes == "admin"

        as_admin = access_policy.redact_notes(incident, Role.ADMIN)
        assert (as_admin.admin_notes, as_admin.teacher_remarks, as_admin.guidance_notes) == (
            "admin", "teacher", "guidance",
        )
