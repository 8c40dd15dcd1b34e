from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from buddyguard.core import access_policy
from buddyguard.core.errors import BuddyGuardError
from buddyguard.core.incident_workflow import apply_suggestion
from buddyguard.core.session import Session
from buddyguard.routers.deps import current_session, http_error, require_access
from buddyguard.schemas.incident import (
    Destination,
    Incident,
    IncidentDraft,
    IncidentListing,
    IncidentType,
    Role,
    Suggestion,
)
from buddyguard.schemas.requests import (
    AnalyzeRequest,
    ApplySuggestionRequest,
    NoteRequest,
    StatusUpdateRequest,
    SubmitResponse,
)

router = APIRouter(prefix="/incidents", tags=["incidents"])

ANONYMOUS_ACK = "Report submitted successfully. School staff will review this."
STAFF_ACK = "Report logged successfully."


@router.get("", response_model=IncidentListing)
async def list_incidents(
    search: str = "",
    incident_type: Optional[IncidentType] = Query(default=None, alias="type"),
    session: Session = Depends(current_session),
) -> IncidentListing:
    """Safety log: search by student or description, optionally one category."""
    require_access(session, Destination.SAFETY_LOG)
    listing = await session.workflow.list(search=search, incident_type=incident_type)
    listing.incidents = [access_policy.redact_notes(i, session.role) for i in listing.incidents]
    return listing


@router.post("", response_model=SubmitResponse, status_code=201)
async def submit_incident(draft: IncidentDraft, session: Session = Depends(current_session)) -> SubmitResponse:
    require_access(session, Destination.SUBMIT_REPORT)
    try:
        incident = await session.workflow.create(draft, session.role)
    except BuddyGuardError as e:
        raise http_error(e)
    return SubmitResponse(
        incident=access_policy.redact_notes(incident, session.role),
        message=ANONYMOUS_ACK if session.role is Role.ANONYMOUS else STAFF_ACK,
    )


@router.post("/analyze", response_model=Optional[Suggestion])
async def analyze_description(
    body: AnalyzeRequest, session: Session = Depends(current_session)
) -> Optional[Suggestion]:
    """AI risk analysis. Returns null when the description is too short or no suggestion is available."""
    require_access(session, Destination.SUBMIT_REPORT)
    return await session.workflow.suggest(body.description)


@router.post("/apply-suggestion", response_model=IncidentDraft)
async def accept_suggestion(
    body: ApplySuggestionRequest, session: Session = Depends(current_session)
) -> IncidentDraft:
    require_access(session, Destination.SUBMIT_REPORT)
    return apply_suggestion(body.draft, body.suggestion)


@router.patch("/{incident_id}/status", response_model=Incident)
async def update_status(
    incident_id: str, body: StatusUpdateRequest, session: Session = Depends(current_session)
) -> Incident:
    require_access(session, Destination.SAFETY_LOG)
    try:
        incident = await session.workflow.transition(incident_id, body.status, session.role)
    except BuddyGuardError as e:
        raise http_error(e)
    return access_policy.redact_notes(incident, session.role)


@router.put("/{incident_id}/note", response_model=Incident)
async def save_note(
    incident_id: str, body: NoteRequest, session: Session = Depends(current_session)
) -> Incident:
    require_access(session, Destination.SAFETY_LOG)
    try:
        incident = await session.workflow.save_note(incident_id, session.role, body.text)
    except BuddyGuardError as e:
        raise http_error(e)
    return access_policy.redact_notes(incident, session.role)


@router.get("/{incident_id}", response_model=Incident)
async def get_incident(incident_id: str, session: Session = Depends(current_session)) -> Incident:
    """One incident from the session's cached safety log."""
    require_access(session, Destination.SAFETY_LOG)
    for incident in session.workflow.cached:
        if incident.id == incident_id:
            return access_policy.redact_notes(incident, session.role)
    raise HTTPException(404, detail=f"Not found: {incident_id}")
