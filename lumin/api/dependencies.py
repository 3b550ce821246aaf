"""Request dependencies: bearer authentication and service lookup"""
import logging
from typing import Optional
from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from lumin.exceptions import AuthenticationError, RecordNotFoundError
from lumin.services.container import ServiceContainer, get_container
from lumin.utils.security import ACCESS_TOKEN_TYPE, decode_token

logger = logging.getLogger(__name__)

# auto_error=False so a missing header goes through our 401 envelope, not FastAPI's 403
security = HTTPBearer(auto_error=False)


def services(request: Request) -> ServiceContainer:
    """Container attached to the app, else the process-wide one"""
    container = getattr(request.app.state, "container", None)
    return container if container is not None else get_container()


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """
    Resolve the user id from the access token in the Authorization header

    Raises:
        AuthenticationError: If the header is missing or the token is invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(
            "Missing bearer token",
            user_message="Not authorized, no token"
        )

    payload = decode_token(credentials.credentials, expected_type=ACCESS_TOKEN_TYPE)
    return payload["sub"]


async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
) -> dict:
    """Load the authenticated user; a deleted account fails authentication"""
    try:
        return await container.user_service.get_user(user_id)
    except RecordNotFoundError:
        raise AuthenticationError("User for access token no longer exists", user_id=user_id)
