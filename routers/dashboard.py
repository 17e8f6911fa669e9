"""
Dashboard APIs (admin and supervisor).
"""
from typing import List
from fastapi import APIRouter, Depends

from auth.dependencies import RequestContext, require_dashboard
from schemas.dashboard import ActivityEntry, DailyActivity, DashboardStats
from services.dashboard_service import DashboardService


router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_stats(ctx: RequestContext = Depends(require_dashboard)):
    """Total records plus today's active users, searches and registrations."""
    return DashboardService.stats(ctx.db)


@router.get("/activities", response_model=List[ActivityEntry])
async def get_recent_activities(ctx: RequestContext = Depends(require_dashboard)):
    """Latest activity log entries, newest first."""
    return DashboardService.recent_activities(ctx.db)


@router.get("/weekly-activity", response_model=List[DailyActivity])
async def get_weekly_activity(ctx: RequestContext = Depends(require_dashboard)):
    return DashboardService.weekly_activity(ctx.db)
