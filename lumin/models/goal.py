"""Goal models and derived progress values"""
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

GoalCategory = Literal["career", "health", "learning", "finance", "relationships", "hobbies", "other"]
GoalPriority = Literal["low", "medium", "high"]
GoalStatus = Literal["active", "completed", "paused", "abandoned"]
GoalSortKey = Literal["created_at", "updated_at", "target_date", "title", "priority", "progress"]

DEFAULT_GOAL_XP_REWARD = 200
DEFAULT_MILESTONE_XP_REWARD = 25


class MilestoneCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=300)
    target_value: Optional[float] = Field(default=None, gt=0)
    xp_reward: int = Field(default=DEFAULT_MILESTONE_XP_REWARD, ge=0, le=1000)


class GoalCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    metric: Optional[str] = Field(default=None, max_length=100)
    target_value: float = Field(..., gt=0)
    current_value: float = Field(default=0, ge=0)
    unit: str = Field(default="units", max_length=30)
    category: GoalCategory = "other"
    priority: GoalPriority = "medium"
    start_date: Optional[date] = None
    target_date: Optional[date] = None
    milestones: List[MilestoneCreate] = Field(default_factory=list)
    xp_reward: int = Field(default=DEFAULT_GOAL_XP_REWARD, ge=0, le=5000)
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: List[str]) -> List[str]:
        return [tag.strip().lower() for tag in v if tag.strip()]


class GoalUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    metric: Optional[str] = Field(default=None, max_length=100)
    target_value: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = Field(default=None, max_length=30)
    category: Optional[GoalCategory] = None
    priority: Optional[GoalPriority] = None
    target_date: Optional[date] = None
    status: Optional[GoalStatus] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = Field(default=None, max_length=2000)


class GoalFilters(BaseModel):
    query: Optional[str] = None
    status: Optional[GoalStatus] = None
    category: Optional[GoalCategory] = None
    priority: Optional[GoalPriority] = None


def milestone_document(milestone: MilestoneCreate) -> Dict[str, Any]:
    return {
        "id": str(uuid4()),
        "title": milestone.title,
        "description": milestone.description,
        "target_value": milestone.target_value,
        "completed": False,
        "completed_at": None,
        "xp_reward": milestone.xp_reward,
    }


def progress_percentage(current_value: float, target_value: float) -> int:
    if not target_value:
        return 0
    return min(100, round(current_value / target_value * 100))


def goal_summary(goal: Dict[str, Any], today: date) -> Dict[str, Any]:
    """
    Goal record with derived fields

    Adds progress_percentage, is_overdue, days_remaining and
    milestone_progress.
    """
    milestones = goal.get("milestones") or []
    completed_milestones = sum(1 for m in milestones if m.get("completed"))
    target_date = goal.get("target_date")
    if isinstance(target_date, datetime):
        target_date = target_date.date()

    days_remaining = (target_date - today).days if target_date else None
    is_overdue = (
        days_remaining is not None
        and days_remaining < 0
        and goal.get("status") != "completed"
    )

    return {
        **goal,
        "progress_percentage": progress_percentage(goal["current_value"], goal["target_value"]),
        "is_overdue": is_overdue,
        "days_remaining": days_remaining,
        "milestone_progress": (
            round(completed_milestones / len(milestones) * 100) if milestones else 0
        ),
    }
