"""
Shared fixtures: an in-memory stand-in for the hosted data store and a
scriptable advisory classifier.
"""

import copy
import itertools
from typing import Any, Optional

import pytest

from buddyguard.core.errors import TransientStoreError
from buddyguard.core.incident_workflow import IncidentWorkflow
from buddyguard.services.classifier import AdvisoryClassifier


def incident_record(id: str, name: str, date: str, **overrides) -> dict[str, Any]:
    record = {
        "id": id,
        "studentName": name,
        "gradeSection": "Grade 9 - B",
        "incidentType": "Other",
        "description": f"Report about {name}",
        "date": date,
        "status": "New",
        "severity": "Medium",
        "reportedBy": "Teacher",
        "adminNotes": None,
        "teacherRemarks": None,
        "guidanceNotes": None,
    }
    record.update(overrides)
    return record


class FakeStore:
    """Implements the DataStore surface over plain dicts, with switchable failures."""

    configured = True

    def __init__(self, incidents: Optional[list[dict]] = None, profiles: Optional[list[dict]] = None):
        self.incidents = [copy.deepcopy(r) for r in (incidents or [])]
        self.profiles = [copy.deepcopy(p) for p in (profiles or [])]
        self.fail_reads = False
        self.fail_writes = False
        self.reachable = True
        self.calls: list[tuple] = []
        self._ids = itertools.count(100)

    def _read(self, name: str) -> None:
        self.calls.append((name,))
        if self.fail_reads:
            raise TransientStoreError(f"{name}: connection refused")

    def _write(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if self.fail_writes:
            raise TransientStoreError(f"{name}: connection refused")

    @property
    def write_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] not in ("query_incidents", "query_profiles", "ping_reachable")]

    def query_incidents(self, order_by_date_desc: bool = True) -> list[dict]:
        self._read("query_incidents")
        rows = copy.deepcopy(self.incidents)
        if order_by_date_desc:
            rows.sort(key=lambda r: r["date"], reverse=True)
        return rows

    def insert_incident(self, record: dict) -> dict:
        self._write("insert_incident", record)
        stored = dict(record, id=str(next(self._ids)))
        for field in ("adminNotes", "teacherRemarks", "guidanceNotes"):
            stored.setdefault(field, None)
        self.incidents.append(stored)
        return copy.deepcopy(stored)

    def update_incident_fields(self, incident_id: str, fields: dict) -> Optional[dict]:
        self._write("update_incident_fields", incident_id, dict(fields))
        for row in self.incidents:
            if row["id"] == incident_id:
                row.update(fields)
                return copy.deepcopy(row)
        return None

    def query_profiles(self, order_by_name_asc: bool = True) -> list[dict]:
        self._read("query_profiles")
        rows = copy.deepcopy(self.profiles)
        if order_by_name_asc:
            rows.sort(key=lambda p: p["name"])
        return rows

    def insert_profile(self, record: dict) -> dict:
        self._write("insert_profile", record)
        stored = dict(record, id=f"u{next(self._ids)}")
        self.profiles.append(stored)
        return dict(stored)

    def update_profile_active(self, profile_id: str, active: bool) -> Optional[dict]:
        self._write("update_profile_active", profile_id, active)
        for row in self.profiles:
            if row["id"] == profile_id:
                row["active"] = active
                return dict(row)
        return None

    def delete_profile(self, profile_id: str) -> bool:
        self._write("delete_profile", profile_id)
        before = len(self.profiles)
        self.profiles = [p for p in self.profiles if p["id"] != profile_id]
        return len(self.profiles) < before

    def ping_reachable(self) -> bool:
        self.calls.append(("ping_reachable",))
        return self.reachable


class ScriptedClassifier(AdvisoryClassifier):
    """Returns a canned answer (or raises) and records what it was asked."""

    provider = "scripted"

    def __init__(self, answer: Any = None, error: Optional[Exception] = None):
        self.answer = answer
        self.error = error
        self.requests: list[str] = []

    async def _request(self, description: str) -> dict:
        self.requests.append(description)
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def seeded_store() -> FakeStore:
    return FakeStore(
        incidents=[
            incident_record("a", "Ana Reyes", "2025-03-01", incidentType="Bullying",
                            description="Pushed in the hallway", severity="High"),
            incident_record("b", "Ben Cruz", "2025-03-05", incidentType="Vandalism",
                            description="Graffiti on the gym wall"),
            incident_record("c", "Carla Lim", "2025-03-01", incidentType="Bullying",
                            description="Name-calling during recess", gradeSection="Grade 7 - A"),
            incident_record("d", "Dan Soto", "2025-02-20", incidentType="Academic Dishonesty",
                            description="Copied answers in the quiz", status="Resolved"),
        ],
        profiles=[
            {"id": "u1", "name": "Admin User", "role": "Admin", "active": True},
            {"id": "u2", "name": "Mrs. Gatmaitan", "role": "Teacher", "active": True},
        ],
    )


@pytest.fixture
def workflow(seeded_store) -> IncidentWorkflow:
    return IncidentWorkflow(seeded_store)
