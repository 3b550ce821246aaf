"""Dashboard and analytics routes"""
import logging
from fastapi import APIRouter, Depends, Query, Request

from lumin.api.dependencies import get_current_user_id, services
from lumin.api.middleware import limiter
from lumin.api.responses import success
from lumin.config import DEFAULT_RATE_LIMIT
from lumin.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/dashboard")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def dashboard(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.stats_service.get_dashboard(user_id))


@router.get("/mood-trends")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def mood_trends(
    request: Request,
    days: int = Query(default=30, ge=1, le=365),
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.stats_service.get_mood_trends(user_id, days=days))


@router.get("/weekly-activity")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def weekly_activity(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.stats_service.get_weekly_activity(user_id))


@router.get("/goal-consistency")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def goal_consistency(
    request: Request,
    days: int = Query(default=30, ge=1, le=365),
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.stats_service.get_goal_consistency(user_id, days=days))


@router.get("/goal-timeline")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def goal_timeline(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.stats_service.get_goal_timeline(user_id))


@router.get("/level")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def level_progress(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.stats_service.get_level_progress(user_id))


@router.get("/streak")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def streak(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.stats_service.get_streak(user_id))
