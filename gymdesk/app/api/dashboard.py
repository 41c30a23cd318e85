from fastapi import APIRouter, Depends, Query

from gymdesk.app.api.responses import unwrap
from gymdesk.app.dependencies.auth import get_current_user
from gymdesk.app.dependencies.services import get_dashboard_service
from gymdesk.app.models.user import User
from gymdesk.app.services.dashboard_service import DashboardService

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats(
    dashboard: DashboardService = Depends(get_dashboard_service), current_user: User = Depends(get_current_user)
):
    return unwrap(dashboard.get_stats())


@router.get("/activities")
async def dashboard_activities(
    limit: int = Query(default=10, ge=1, le=50),
    dashboard: DashboardService = Depends(get_dashboard_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(dashboard.get_recent_activities(limit))
