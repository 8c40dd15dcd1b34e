"""
Incident workflow for one session.

Holds a cached copy of the incidents collection and mediates every read and
write against the data store:

  reads   -- fail soft: a failed store read serves the cached copy (or the
             fallback sample set if the store was never read), logged and
             flagged as degraded
  writes  -- fail loud: store errors propagate, and the cache is only
             updated after the store has acknowledged the write
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from buddyguard.core import access_policy
from buddyguard.core.errors import (
    Forbidden,
    IncidentNotFound,
    NoWritableField,
    TransientStoreError,
    ValidationError,
)
from buddyguard.core.fallback import sample_incidents
from buddyguard.schemas.incident import (
    Incident,
    IncidentDraft,
    IncidentListing,
    IncidentType,
    Role,
    Severity,
    Status,
    Suggestion,
)
from buddyguard.services.classifier import AdvisoryClassifier, match_incident_type
from buddyguard.services.data_store import DataStore

logger = logging.getLogger(__name__)

REQUIRED_DRAFT_FIELDS = ("student_name", "grade_section", "description", "date")


def missing_fields(draft: IncidentDraft) -> list[str]:
    missing = []
    for name in REQUIRED_DRAFT_FIELDS:
        value = getattr(draft, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def apply_suggestion(draft: IncidentDraft, suggestion: Suggestion) -> IncidentDraft:
    """Explicit acceptance of an advisory suggestion: adopt its type and severity."""
    return draft.model_copy(update={
        "incident_type": match_incident_type(suggestion.suggested_type),
        "severity": suggestion.severity,
    })


def filter_incidents(
    incidents: list[Incident],
    search: str = "",
    incident_type: Optional[IncidentType] = None,
) -> list[Incident]:
    """Substring search on name or description plus an exact type filter, newest first."""
    needle = search.strip().lower()
    matches = [
        i for i in incidents
        if (not needle or needle in i.student_name.lower() or needle in i.description.lower())
        and (incident_type is None or i.incident_type == incident_type)
    ]
    # sorted() is stable with reverse=True, so equal dates keep store order
    return sorted(matches, key=lambda i: i.date, reverse=True)


class IncidentWorkflow:

    def __init__(self, store: DataStore, classifier: Optional[AdvisoryClassifier] = None):
        self._store = store
        self._classifier = classifier
        self._cache: list[Incident] = []
        self._loaded = False
        self.degraded = False

    @property
    def cached(self) -> list[Incident]:
        return list(self._cache)

    async def refresh(self) -> None:
        """Reload the cache from the store; falls back instead of raising."""
        try:
            rows = await asyncio.to_thread(self._store.query_incidents, True)
        except TransientStoreError as e:
            self.degraded = True
            if self._loaded:
                logger.warning("Incident read failed, serving %d cached incidents: %s", len(self._cache), e)
            else:
                self._cache = sample_incidents()
                logger.warning("Incident read failed, serving fallback sample set: %s", e)
            return

        incidents = []
        skipped = 0
        for row in rows:
            try:
                incidents.append(Incident.model_validate(row))
            except PydanticValidationError as e:
                skipped += 1
                logger.warning(
                    "Skipping malformed incident row %r: %d error(s), first: %s",
                    row.get("id") if isinstance(row, dict) else None,
                    e.error_count(),
                    e.errors()[0]["msg"],
                )
        self._cache = incidents
        self._loaded = True
        self.degraded = skipped > 0

    async def list(self, search: str = "", incident_type: Optional[IncidentType] = None) -> IncidentListing:
        await self.refresh()
        return IncidentListing(
            incidents=filter_incidents(self._cache, search, incident_type),
            degraded=self.degraded,
        )

    async def create(self, draft: IncidentDraft, role: Role) -> Incident:
        missing = missing_fields(draft)
        if missing:
            raise ValidationError(missing)

        record = {
            "studentName": draft.student_name.strip(),
            "gradeSection": draft.grade_section.strip(),
            "incidentType": (draft.incident_type or IncidentType.OTHER).value,
            "description": draft.description.strip(),
            "date": draft.date.isoformat(),
            "status": Status.NEW.value,
            "reportedBy": role.value,
            "severity": (draft.severity or Severity.MEDIUM).value,
        }
        try:
            stored = await asyncio.to_thread(self._store.insert_incident, record)
        except TransientStoreError:
            logger.exception("Failed to submit incident report")
            raise
        incident = Incident.model_validate(stored)
        self._cache.insert(0, incident)
        logger.info("Incident %s submitted by %s", incident.id, role.value)
        return incident

    async def transition(self, incident_id: str, new_status: Status, role: Role) -> Incident:
        # permission depends only on role and target status, so it is checked before any read
        if new_status not in access_policy.allowed_statuses(role):
            raise Forbidden(f"{role.value} may not set status {new_status.value!r}")
        current = await self._lookup(incident_id)

        try:
            stored = await asyncio.to_thread(
                self._store.update_incident_fields, incident_id, {"status": new_status.value}
            )
        except TransientStoreError:
            logger.exception("Failed to update status of incident %s", incident_id)
            raise
        if stored is None:
            raise IncidentNotFound(incident_id)

        updated = current.model_copy(update={"status": new_status})
        self._replace(updated)
        logger.info("Incident %s: %s -> %s by %s", incident_id, current.status.value, new_status.value, role.value)
        return updated

    async def save_note(self, incident_id: str, role: Role, text: str) -> Incident:
        field = access_policy.note_field_for(role)
        if field is None:
            raise NoWritableField(f"{role.value} has no note field")
        current = await self._lookup(incident_id)

        try:
            stored = await asyncio.to_thread(
                self._store.update_incident_fields, incident_id, {field.value: text}
            )
        except TransientStoreError:
            logger.exception("Failed to save %s on incident %s", field.value, incident_id)
            raise
        if stored is None:
            raise IncidentNotFound(incident_id)

        updated = current.model_copy(update={field.attr: text})
        self._replace(updated)
        return updated

    async def suggest(self, description: str) -> Optional[Suggestion]:
        if self._classifier is None:
            return None
        return await self._classifier.suggest(description)

    async def _lookup(self, incident_id: str) -> Incident:
        incident = self._find(incident_id)
        if incident is None and not self._loaded:
            await self.refresh()
            incident = self._find(incident_id)
        if incident is None:
            raise IncidentNotFound(incident_id)
        return incident

    def _find(self, incident_id: str) -> Optional[Incident]:
        for incident in self._cache:
            if incident.id == incident_id:
                return incident
        return None

    def _replace(self, incident: Incident) -> None:
        self._cache = [incident if i.id == incident.id else i for i in self._cache]
