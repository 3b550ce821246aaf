"""Pydantic models for API request/response validation

Domain input models (entries, goals, users) live in lumin.models; this module
holds the bodies that only exist at the HTTP boundary.
"""
from typing import Optional, List, Literal
from pydantic import BaseModel, Field, field_validator
from datetime import datetime


class RefreshRequest(BaseModel):
    """Request to exchange a refresh token"""
    refresh_token: str = Field(..., min_length=1, description="Refresh token from login")


class ProgressUpdateRequest(BaseModel):
    """Request to set a goal's current value"""
    current_value: float = Field(..., description="New current value")


class ChallengeCompleteRequest(BaseModel):
    """Optional body for manual challenge completion"""
    progress: Optional[int] = Field(default=None, ge=0, description="Progress to record")


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1, max_length=2000)


class ChatRequest(BaseModel):
    """Request model for the AI coach chat"""
    message: str = Field(..., min_length=1, max_length=2000, description="User message text")
    history: List[ChatMessage] = Field(
        default_factory=list,
        description="Previous messages in the conversation"
    )

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message cannot be empty")
        return v


class PlanGoalRequest(BaseModel):
    """Plan an existing goal by id or a free-text goal idea"""
    goal_id: Optional[str] = None
    goal_idea: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, max_length=50)
    timeframe: Optional[str] = Field(default=None, max_length=100)


class SuggestHabitsRequest(BaseModel):
    current_habits: List[str] = Field(default_factory=list, max_length=20)


class MotivationRequest(BaseModel):
    situation: Optional[str] = Field(default=None, max_length=500)


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    database: str = Field(..., description="Database connection status")
    timestamp: datetime = Field(..., description="Check timestamp")
