"""Daily challenge routes"""
import logging
from typing import Optional
from fastapi import APIRouter, Body, Depends, Query, Request

from lumin.api.dependencies import get_current_user_id, services
from lumin.api.middleware import limiter
from lumin.api.models import ChallengeCompleteRequest
from lumin.api.responses import success
from lumin.config import DEFAULT_RATE_LIMIT
from lumin.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/challenges", tags=["challenges"])


@router.get("/today")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def get_today_challenges(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    """Generate today's three challenges on first request, then return the same set"""
    return success(await container.challenge_service.get_today_challenges(user_id))


@router.patch("/{challenge_id}/complete")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def complete_challenge(
    request: Request,
    challenge_id: str,
    body: Optional[ChallengeCompleteRequest] = Body(default=None),
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    result = await container.challenge_service.complete_challenge(
        user_id, challenge_id, progress=body.progress if body else None
    )
    return success(result, f"Challenge completed! +{result['xp_earned']} XP")


@router.get("/history")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def challenge_history(
    request: Request,
    days: int = Query(default=30, ge=1, le=365),
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.challenge_service.get_history(user_id, days=days))


@router.get("/stats")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def challenge_stats(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.challenge_service.get_stats(user_id))
