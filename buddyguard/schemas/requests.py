from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from buddyguard.schemas.incident import (
    DashboardPanel,
    Destination,
    Incident,
    IncidentDraft,
    Role,
    Status,
    Suggestion,
)


class _CamelBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OpenSessionRequest(BaseModel):
    role: Role


class SessionView(_CamelBody):
    session_id: str
    role: Role
    nav: list[Destination]
    panels: list[DashboardPanel]
    landing: Destination
    ai_enabled: bool = False


class AnalyzeRequest(BaseModel):
    description: str = ""


class ApplySuggestionRequest(BaseModel):
    draft: IncidentDraft
    suggestion: Suggestion


class SubmitResponse(BaseModel):
    incident: Incident       # already redacted for the submitting role
    message: str


class StatusUpdateRequest(BaseModel):
    status: Status


class NoteRequest(BaseModel):
    text: str = ""


class NewStaffRequest(BaseModel):
    name: str
    role: Role


class ActiveRequest(BaseModel):
    active: bool


class LiveStatus(_CamelBody):
    live: bool
    checked_at: Optional[float] = Field(default=None, description="epoch seconds of the last ping")
