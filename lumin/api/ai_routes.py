"""AI coach routes

Model failures do not produce error statuses: the body carries
success=false, the error text and fallback content where one exists.
"""
import logging
from fastapi import APIRouter, Depends, Request

from lumin.api.dependencies import get_current_user_id, services
from lumin.api.middleware import limiter
from lumin.api.models import ChatRequest, MotivationRequest, PlanGoalRequest, SuggestHabitsRequest
from lumin.api.responses import success
from lumin.config import AI_RATE_LIMIT, DEFAULT_RATE_LIMIT
from lumin.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


def _coach_reply(result: dict) -> dict:
    """Lift the service's success flag into the envelope"""
    body = success(result)
    body["success"] = result.get("success", False)
    if not body["success"]:
        body["message"] = "AI coach is unavailable, showing fallback content"
    return body


@router.get("/prompts")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def get_prompts(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    """Static catalogue of coach prompts"""
    return success(container.coach_service.get_prompts())


@router.get("/smart-prompts")
@limiter.limit(AI_RATE_LIMIT)
async def smart_prompts(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return _coach_reply(await container.coach_service.smart_prompts(user_id))


@router.post("/analyze-mood")
@limiter.limit(AI_RATE_LIMIT)
async def analyze_mood(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return _coach_reply(await container.coach_service.analyze_mood(user_id))


@router.post("/plan-goal")
@limiter.limit(AI_RATE_LIMIT)
async def plan_goal(
    request: Request,
    body: PlanGoalRequest,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    result = await container.coach_service.plan_goal(
        user_id,
        goal_id=body.goal_id,
        goal_idea=body.goal_idea,
        category=body.category,
        timeframe=body.timeframe,
    )
    return _coach_reply(result)


@router.post("/suggest-habits")
@limiter.limit(AI_RATE_LIMIT)
async def suggest_habits(
    request: Request,
    body: SuggestHabitsRequest,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return _coach_reply(await container.coach_service.suggest_habits(user_id, body.current_habits))


@router.post("/motivate")
@limiter.limit(AI_RATE_LIMIT)
async def motivate(
    request: Request,
    body: MotivationRequest,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return _coach_reply(await container.coach_service.motivate(user_id, body.situation))


@router.post("/chat")
@limiter.limit(AI_RATE_LIMIT)
async def chat(
    request: Request,
    body: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    history = [message.model_dump() for message in body.history]
    return _coach_reply(await container.coach_service.chat(user_id, body.message, history))
