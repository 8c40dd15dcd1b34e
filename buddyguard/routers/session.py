from fastapi import APIRouter, Depends, Request

from buddyguard.core import access_policy
from buddyguard.core.session import Session
from buddyguard.routers.deps import current_session, get_registry
from buddyguard.schemas.requests import OpenSessionRequest, SessionView

router = APIRouter(prefix="/session", tags=["session"])


def _view(request: Request, session: Session) -> SessionView:
    return SessionView(
        session_id=session.id,
        role=session.role,
        nav=list(access_policy.visible_nav(session.role)),
        panels=list(access_policy.visible_panels(session.role)),
        landing=access_policy.landing_destination(session.role),
        ai_enabled=request.app.state.classifier.enabled,
    )


@router.post("", response_model=SessionView, status_code=201)
async def open_session(body: OpenSessionRequest, request: Request) -> SessionView:
    """Portal entry: pick a role. No credentials are involved."""
    session = get_registry(request).open(body.role)
    return _view(request, session)


@router.get("", response_model=SessionView)
async def get_session(request: Request, session: Session = Depends(current_session)) -> SessionView:
    return _view(request, session)


@router.delete("", status_code=204)
async def close_session(request: Request, session: Session = Depends(current_session)) -> None:
    """Exit the portal: discards the session and its cached incidents."""
    get_registry(request).close(session.id)
