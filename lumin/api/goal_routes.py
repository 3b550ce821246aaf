"""Goal routes"""
import logging
from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query, Request, status

from lumin.api.dependencies import get_current_user_id, services
from lumin.api.middleware import limiter
from lumin.api.models import ProgressUpdateRequest
from lumin.api.responses import success
from lumin.config import DEFAULT_RATE_LIMIT
from lumin.models.goal import (
    GoalCategory,
    GoalCreate,
    GoalFilters,
    GoalPriority,
    GoalSortKey,
    GoalStatus,
    GoalUpdate,
)
from lumin.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/goals", tags=["goals"])


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(DEFAULT_RATE_LIMIT)
async def create_goal(
    request: Request,
    body: GoalCreate,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    result = await container.goal_service.create_goal(user_id, body)
    return success(result, f"Goal created! +{result['xp_earned']} XP")


@router.get("")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def list_goals(
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    query: Optional[str] = Query(default=None, max_length=100),
    status: Optional[GoalStatus] = None,
    category: Optional[GoalCategory] = None,
    priority: Optional[GoalPriority] = None,
    sort_by: GoalSortKey = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    """Search, filter, sort and paginate goals; includes per-status counts"""
    filters = GoalFilters(query=query, status=status, category=category, priority=priority)
    result = await container.goal_service.list_goals(
        user_id, filters, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
    )
    return success(result)


# Registered before /{goal_id} so "stats" is not read as an id
@router.get("/stats/overview")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def goal_stats(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.goal_service.get_stats(user_id))


@router.get("/{goal_id}")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def get_goal(
    request: Request,
    goal_id: str,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.goal_service.get_goal(user_id, goal_id))


@router.put("/{goal_id}")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def update_goal(
    request: Request,
    goal_id: str,
    body: GoalUpdate,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    result = await container.goal_service.update_goal(user_id, goal_id, body)
    return success(result, "Goal updated successfully")


@router.delete("/{goal_id}")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def delete_goal(
    request: Request,
    goal_id: str,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    await container.goal_service.delete_goal(user_id, goal_id)
    return success(message="Goal deleted successfully")


@router.patch("/{goal_id}/progress")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def update_progress(
    request: Request,
    goal_id: str,
    body: ProgressUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    result = await container.goal_service.update_progress(user_id, goal_id, body.current_value)
    message = "Goal completed! 🎉" if result["goal_completed"] else "Progress updated"
    return success(result, message)


@router.patch("/{goal_id}/milestones/{milestone_id}")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def complete_milestone(
    request: Request,
    goal_id: str,
    milestone_id: str,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    result = await container.goal_service.complete_milestone(user_id, goal_id, milestone_id)
    return success(result, "Milestone completed!")
