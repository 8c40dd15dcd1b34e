"""Shared request dependencies and domain-error -> HTTP mapping for the routers."""

from __future__ import annotations

from fastapi import Header, HTTPException, Request

from buddyguard.core import access_policy
from buddyguard.core.errors import (
    BuddyGuardError,
    Forbidden,
    IncidentNotFound,
    ProfileNotFound,
    SessionNotFound,
    TransientStoreError,
    ValidationError,
)
from buddyguard.core.session import Session, SessionRegistry
from buddyguard.schemas.incident import Destination

STORE_UNREACHABLE = (
    "Could not reach the school incident database. "
    "Check your internet connection and try again; nothing was saved."
)


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def current_session(request: Request, x_session_id: str = Header(default="")) -> Session:
    if not x_session_id:
        raise HTTPException(401, detail="No session: choose a role at POST /session first")
    try:
        return get_registry(request).get(x_session_id)
    except SessionNotFound:
        raise HTTPException(401, detail="Unknown or closed session: choose a role again")


def require_access(session: Session, destination: Destination) -> None:
    if not access_policy.can_access(session.role, destination):
        raise HTTPException(403, detail=f"{session.role.value} cannot open {destination.value}")


def http_error(e: BuddyGuardError) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(422, detail={"message": str(e), "missingFields": e.missing_fields})
    if isinstance(e, Forbidden):
        return HTTPException(403, detail=str(e))
    if isinstance(e, (IncidentNotFound, ProfileNotFound)):
        return HTTPException(404, detail=f"Not found: {e}")
    if isinstance(e, TransientStoreError):
        return HTTPException(503, detail=STORE_UNREACHABLE)
    return HTTPException(500, detail=str(e))
