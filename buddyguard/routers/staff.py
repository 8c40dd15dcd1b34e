from fastapi import APIRouter, Depends, Request

from buddyguard.core.errors import BuddyGuardError
from buddyguard.core.session import Session
from buddyguard.core.staff_directory import StaffDirectory
from buddyguard.routers.deps import current_session, http_error
from buddyguard.schemas.incident import StaffProfile
from buddyguard.schemas.requests import ActiveRequest, NewStaffRequest

router = APIRouter(prefix="/users", tags=["users"])


def _directory(request: Request) -> StaffDirectory:
    return request.app.state.staff


@router.get("")
async def list_staff(request: Request, session: Session = Depends(current_session)) -> dict:
    try:
        profiles, degraded = await _directory(request).list(session.role)
    except BuddyGuardError as e:
        raise http_error(e)
    return {"users": [p.model_dump(mode="json") for p in profiles], "degraded": degraded}


@router.post("", response_model=StaffProfile, status_code=201)
async def add_staff(
    body: NewStaffRequest, request: Request, session: Session = Depends(current_session)
) -> StaffProfile:
    try:
        return await _directory(request).create(session.role, body.name, body.role)
    except BuddyGuardError as e:
        raise http_error(e)


@router.patch("/{profile_id}/active", response_model=StaffProfile)
async def set_staff_active(
    profile_id: str, body: ActiveRequest, request: Request, session: Session = Depends(current_session)
) -> StaffProfile:
    """Deactivate (or reactivate) an account without deleting it."""
    try:
        return await _directory(request).set_active(session.role, profile_id, body.active)
    except BuddyGuardError as e:
        raise http_error(e)


@router.delete("/{profile_id}", status_code=204)
async def delete_staff(profile_id: str, request: Request, session: Session = Depends(current_session)) -> None:
    """Permanent. Cannot be undone."""
    try:
        await _directory(request).delete(session.role, profile_id)
    except BuddyGuardError as e:
        raise http_error(e)
