from __future__ import annotations

import re
from collections import Counter

from pydantic import BaseModel, Field

from buddyguard.core import access_policy
from buddyguard.core.incident_workflow import IncidentWorkflow
from buddyguard.schemas.incident import (
    DashboardPanel,
    Incident,
    IncidentType,
    Role,
    Severity,
    Status,
)

_GRADE_RE = re.compile(r"(\d+)")


class BreakdownEntry(BaseModel):
    name: str
    value: int


class DashboardStats(BaseModel):
    total: int = 0
    resolved: int = 0
    critical: int = 0                # High severity
    counseling: int = 0              # Under Counseling
    panels: list[DashboardPanel] = Field(default_factory=list)
    by_category: list[BreakdownEntry] | None = None
    by_grade: list[BreakdownEntry] | None = None
    degraded: bool = False


def grade_of(grade_section: str) -> str:
    """'Grade 10 - A' -> 'Grade 10', '7-B' -> 'Grade 7'; no number -> 'Unspecified'."""
    m = _GRADE_RE.search(grade_section or "")
    return f"Grade {int(m.group(1))}" if m else "Unspecified"


def category_breakdown(incidents: list[Incident]) -> list[BreakdownEntry]:
    counts = Counter(i.incident_type for i in incidents)
    return [
        BreakdownEntry(name=t.value, value=counts[t])
        for t in IncidentType
        if counts[t]
    ]


def grade_breakdown(incidents: list[Incident]) -> list[BreakdownEntry]:
    counts = Counter(grade_of(i.grade_section) for i in incidents)

    def order(name: str) -> tuple[int, int]:
        m = _GRADE_RE.search(name)
        return (0, int(m.group(1))) if m else (1, 0)

    return [BreakdownEntry(name=name, value=counts[name]) for name in sorted(counts, key=order)]


def summarize(incidents: list[Incident], role: Role) -> DashboardStats:
    panels = access_policy.visible_panels(role)
    stats = DashboardStats(
        total=len(incidents),
        resolved=sum(1 for i in incidents if i.status == Status.RESOLVED),
        critical=sum(1 for i in incidents if i.severity == Severity.HIGH),
        counseling=sum(1 for i in incidents if i.status == Status.UNDER_COUNSELING),
        panels=list(panels),
    )
    if DashboardPanel.CATEGORY_BREAKDOWN in panels:
        stats.by_category = category_breakdown(incidents)
    if DashboardPanel.GRADE_BREAKDOWN in panels:
        stats.by_grade = grade_breakdown(incidents)
    return stats


async def dashboard_for(workflow: IncidentWorkflow, role: Role) -> DashboardStats:
    listing = await workflow.list()
    stats = summarize(listing.incidents, role)
    stats.degraded = listing.degraded
    return stats
