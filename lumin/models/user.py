"""User models"""
import re
from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$")
MIN_PASSWORD_LENGTH = 6


def _check_time(v: str) -> str:
    if not re.fullmatch(r"([01]\d|2[0-3]):[0-5]\d", v):
        raise ValueError(f"Invalid time format: '{v}'. Must be HH:MM (e.g., '09:00')")
    return v


class UserSettings(BaseModel):
    """Per-user preferences stored as a document on the user"""
    email_notifications: bool = True
    daily_reminder: bool = True
    reminder_time: str = "09:00"
    theme: Literal["light", "dark", "system"] = "system"
    language: str = "en"

    @field_validator("reminder_time")
    @classmethod
    def validate_reminder_time(cls, v: str) -> str:
        """Ensure HH:MM format"""
        return _check_time(v)


class UserRegistration(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please provide a valid email")
        return v


class UserCredentials(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdate(BaseModel):
    """Editable profile fields; omitted fields are left unchanged"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    avatar: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=100)
    occupation: Optional[str] = Field(default=None, max_length=100)
    date_of_birth: Optional[date] = None


class SettingsUpdate(BaseModel):
    email_notifications: Optional[bool] = None
    daily_reminder: Optional[bool] = None
    reminder_time: Optional[str] = None
    theme: Optional[Literal["light", "dark", "system"]] = None
    language: Optional[str] = Field(default=None, min_length=2, max_length=10)

    @field_validator("reminder_time")
    @classmethod
    def validate_reminder_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_time(v)


def public_user(user: dict) -> dict:
    """User record as exposed by the API"""
    return {k: v for k, v in user.items() if k != "password_hash"}
