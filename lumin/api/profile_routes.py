"""Profile and settings routes"""
import logging
from fastapi import APIRouter, Depends, Request

from lumin.api.dependencies import get_current_user_id, services
from lumin.api.middleware import limiter
from lumin.api.responses import success
from lumin.config import DEFAULT_RATE_LIMIT
from lumin.models.user import ProfileUpdate, SettingsUpdate
from lumin.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def get_profile(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.user_service.get_profile(user_id))


@router.put("")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def update_profile(
    request: Request,
    body: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    user = await container.user_service.update_profile(user_id, body)
    return success(user, "Profile updated successfully")


@router.put("/settings")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def update_settings(
    request: Request,
    body: SettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    """Merge the given settings into the stored ones"""
    settings = await container.user_service.update_settings(user_id, body)
    return success(settings, "Settings updated successfully")
