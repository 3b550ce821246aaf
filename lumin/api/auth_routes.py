"""Account routes: registration, login, token refresh, current user"""
import logging
from fastapi import APIRouter, Depends, Request, status

from lumin.api.dependencies import get_current_user, services
from lumin.api.middleware import limiter
from lumin.api.models import RefreshRequest
from lumin.api.responses import success
from lumin.config import AUTH_RATE_LIMIT, DEFAULT_RATE_LIMIT
from lumin.models.user import UserCredentials, UserRegistration
from lumin.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    body: UserRegistration,
    container: ServiceContainer = Depends(services)
):
    """Create an account and return a token pair"""
    result = await container.user_service.register(body)
    return success(result, "User registered successfully")


@router.post("/login")
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    body: UserCredentials,
    container: ServiceContainer = Depends(services)
):
    result = await container.user_service.login(body)
    return success(result, "Login successful")


@router.post("/refresh")
@limiter.limit(AUTH_RATE_LIMIT)
async def refresh(
    request: Request,
    body: RefreshRequest,
    container: ServiceContainer = Depends(services)
):
    """Exchange a refresh token for a new access/refresh pair"""
    tokens = await container.user_service.refresh(body.refresh_token)
    return success(tokens)


@router.get("/me")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def me(request: Request, user: dict = Depends(get_current_user)):
    return success(user)
