"""
UserService - Accounts, authentication, profile and settings

Separates account business logic from the API routes and the database layer.
"""

import logging
from typing import Any, Dict

from lumin.db import queries
from lumin.exceptions import AuthenticationError, RecordNotFoundError, ValidationError
from lumin.gamification.xp_system import calculate_level_from_xp
from lumin.models.user import (
    ProfileUpdate,
    SettingsUpdate,
    UserCredentials,
    UserRegistration,
    UserSettings,
    public_user,
)
from lumin.utils.security import (
    REFRESH_TOKEN_TYPE,
    create_token_pair,
    decode_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


class UserService:
    """
    Service for user accounts.

    Responsibilities:
    - Registration and credential checks
    - Access/refresh token issuance
    - Profile and settings updates
    """

    async def register(self, data: UserRegistration) -> Dict[str, Any]:
        """
        Create a new account.

        Returns:
            dict: {'user': dict, 'access_token': str, 'refresh_token': str, 'token_type': str}

        Raises:
            ValidationError: If the email is already registered
        """
        if await queries.get_user_by_email(data.email):
            raise ValidationError("User already exists with this email", field="email")

        user = await queries.create_user(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            settings=UserSettings().model_dump(),
        )
        logger.info(f"Registered user {user['id']}")
        return {"user": public_user(user), **create_token_pair(str(user["id"]))}

    async def login(self, credentials: UserCredentials) -> Dict[str, Any]:
        user = await queries.get_user_by_email(credentials.email)
        if not user or not verify_password(credentials.password, user["password_hash"]):
            raise AuthenticationError(
                "Invalid email or password",
                user_message="Invalid email or password"
            )

        logger.info(f"User {user['id']} logged in")
        return {"user": public_user(user), **create_token_pair(str(user["id"]))}

    async def refresh(self, refresh_token: str) -> Dict[str, Any]:
        """Exchange a valid refresh token for a new token pair"""
        payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
        user = await queries.get_user_by_id(payload["sub"])
        if not user:
            raise AuthenticationError("User for refresh token no longer exists")
        return create_token_pair(str(user["id"]))

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        user = await queries.get_user_by_id(user_id)
        if not user:
            raise RecordNotFoundError(f"User {user_id} not found", record_type="User", record_id=user_id)
        return public_user(user)

    async def get_profile(self, user_id: str) -> Dict[str, Any]:
        """User record with level progress"""
        user = await self.get_user(user_id)
        return {**user, "level_progress": calculate_level_from_xp(user["xp"])}

    async def update_profile(self, user_id: str, data: ProfileUpdate) -> Dict[str, Any]:
        fields = data.model_dump(exclude_unset=True)
        user = await queries.update_user_profile(user_id, fields)
        if not user:
            raise RecordNotFoundError(f"User {user_id} not found", record_type="User", record_id=user_id)
        logger.info(f"Updated profile fields {sorted(fields)} for user {user_id}")
        return public_user(user)

    async def update_settings(self, user_id: str, data: SettingsUpdate) -> Dict[str, Any]:
        settings = data.model_dump(exclude_none=True)
        if not settings:
            raise ValidationError("No settings provided", field="settings")

        user = await queries.update_user_settings(user_id, settings)
        if not user:
            raise RecordNotFoundError(f"User {user_id} not found", record_type="User", record_id=user_id)
        return user["settings"]
