from fastapi import APIRouter, Depends, Request

from buddyguard.core.dashboard_stats import DashboardStats, dashboard_for
from buddyguard.core.session import Session
from buddyguard.routers.deps import current_session, require_access
from buddyguard.schemas.incident import Destination
from buddyguard.schemas.requests import LiveStatus

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(session: Session = Depends(current_session)) -> DashboardStats:
    """
    Summary counts for every staff role; category and grade breakdowns
    only for the roles allowed to see the charts.
    """
    require_access(session, Destination.DASHBOARD)
    return await dashboard_for(session.workflow, session.role)


@router.get("/status/live", response_model=LiveStatus)
async def get_live_status(request: Request) -> LiveStatus:
    """Latest result of the periodic data store ping (for the header indicator)."""
    monitor = request.app.state.liveness
    return LiveStatus(live=monitor.is_live, checked_at=monitor.checked_at)
