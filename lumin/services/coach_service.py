"""
CoachService - User context for the AI coach

Collects moods, goals, streak and level from persistence and hands plain
dicts to AIService. AI failures never raise from here; missing data does.
"""

import logging
from typing import Any, Dict, List, Optional

from lumin.db import queries
from lumin.exceptions import RecordNotFoundError, ValidationError
from lumin.gamification.streak_system import get_streak_info
from lumin.services.ai_service import AIService
from lumin.utils.clock import Clock, day_window
from lumin.utils.ids import ensure_owner, parse_record_id

logger = logging.getLogger(__name__)

MOOD_WINDOW_DAYS = 7
MAX_CHAT_HISTORY = 10

COACH_PROMPTS = [
    {
        "id": 1,
        "category": "mood",
        "title": "😊 Analyze My Mood",
        "description": "Get insights about your recent emotional patterns",
        "prompt": "Analyze my mood patterns and give me insights",
    },
    {
        "id": 2,
        "category": "goals",
        "title": "🎯 Plan a Goal",
        "description": "Get help creating a structured goal plan",
        "prompt": "Help me plan a new goal with milestones",
    },
    {
        "id": 3,
        "category": "habits",
        "title": "🔄 Suggest Habits",
        "description": "Get personalized habit recommendations",
        "prompt": "Suggest some good habits for my lifestyle",
    },
    {
        "id": 4,
        "category": "motivation",
        "title": "💪 Get Motivated",
        "description": "Receive personalized motivation and encouragement",
        "prompt": "I need some motivation today",
    },
    {
        "id": 5,
        "category": "reflection",
        "title": "🤔 Weekly Reflection",
        "description": "Reflect on your weekly progress and learnings",
        "prompt": "Help me reflect on my week",
    },
    {
        "id": 6,
        "category": "productivity",
        "title": "⚡ Boost Productivity",
        "description": "Get tips to improve your productivity",
        "prompt": "How can I be more productive?",
    },
]


def time_of_day(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    elif 12 <= hour < 17:
        return "afternoon"
    elif 17 <= hour < 22:
        return "evening"
    return "night"


class CoachService:
    """
    Service for the AI coach routes.

    Responsibilities:
    - Build prompt context from the user's journal, goals and streak
    - Reject analysis requests that have nothing to analyze
    - Delegate model calls to AIService
    """

    def __init__(self, clock: Clock, ai_service: AIService):
        self.clock = clock
        self.ai = ai_service

    def get_prompts(self) -> List[Dict[str, Any]]:
        return [dict(prompt) for prompt in COACH_PROMPTS]

    async def _user(self, user_id: str) -> Dict[str, Any]:
        user = await queries.get_user_by_id(user_id)
        if not user:
            raise RecordNotFoundError(f"User {user_id} not found", record_type="User", record_id=user_id)
        return user

    async def _base_context(self, user_id: str) -> Dict[str, Any]:
        user = await self._user(user_id)
        recent = await queries.get_recent_entries(user_id, limit=5)
        goals = await queries.get_user_goals(user_id, status="active")
        streak = await get_streak_info(user_id, self.clock)
        return {
            "user": user,
            "recent_entries": recent,
            "goals": goals,
            "streak": streak["current_streak"],
        }

    async def smart_prompts(self, user_id: str) -> Dict[str, Any]:
        base = await self._base_context(user_id)
        context = {
            "recent_moods": [e["mood"] for e in base["recent_entries"]],
            "goals_count": len(base["goals"]),
            "time_of_day": time_of_day(self.clock.now().hour),
            "streak": base["streak"],
        }
        return await self.ai.generate_smart_prompts(context)

    async def analyze_mood(self, user_id: str) -> Dict[str, Any]:
        """
        Analyze the last week of entries.

        Raises:
            ValidationError: If there are no entries in the window
        """
        first_day, last_day = day_window(self.clock, MOOD_WINDOW_DAYS)
        entries = await queries.get_entries_between(user_id, first_day, last_day)
        if not entries:
            raise ValidationError(
                "No recent entries found to analyze. Create some journal entries first!",
                user_id=user_id,
            )

        distribution: Dict[str, int] = {}
        for entry in entries:
            distribution[entry["mood"]] = distribution.get(entry["mood"], 0) + 1

        # Newest first, at most 10 as sample material
        samples = sorted(entries, key=lambda e: e["entry_date"], reverse=True)[:10]
        result = await self.ai.analyze_mood({
            "entries": [{"mood": e["mood"], "notes": e["notes"]} for e in samples],
            "mood_distribution": distribution,
        })
        result["entries_analyzed"] = len(entries)
        result["date_range"] = {"from": first_day.isoformat(), "to": last_day.isoformat()}
        return result

    async def plan_goal(
        self,
        user_id: str,
        goal_id: Optional[str] = None,
        goal_idea: Optional[str] = None,
        category: Optional[str] = None,
        timeframe: Optional[str] = None
    ) -> Dict[str, Any]:
        """Plan either one of the user's goals or a free-text goal idea"""
        if goal_id:
            goal_id = parse_record_id(goal_id, "Goal")
            goal = await queries.get_goal_by_id(goal_id)
            if not goal:
                raise RecordNotFoundError(f"Goal {goal_id} not found", record_type="Goal", record_id=goal_id)
            ensure_owner(goal, user_id, "Goal")
            context = {
                "title": goal["title"],
                "description": goal.get("description"),
                "target_value": goal["target_value"],
                "target_date": goal["target_date"].isoformat() if goal.get("target_date") else None,
                "category": goal["category"],
            }
        elif goal_idea:
            context = {
                "title": goal_idea,
                "description": None,
                "target_value": "a measurable target",
                "target_date": timeframe,
                "category": category or "other",
            }
        else:
            raise ValidationError("Please provide a goal idea", field="goal_idea")

        result = await self.ai.plan_goal(context)
        result["original_idea"] = context["title"]
        return result

    async def suggest_habits(self, user_id: str, current_habits: Optional[List[str]] = None) -> Dict[str, Any]:
        base = await self._base_context(user_id)
        entries = await queries.get_recent_entries(user_id, limit=10)
        result = await self.ai.suggest_habits({
            "entries": [{"notes": e["notes"]} for e in entries],
            "goals": [{"title": g["title"]} for g in base["goals"][:5]],
            "current_habits": current_habits or [],
        })
        result["based_on"] = {"goals_count": len(base["goals"]), "entries_analyzed": len(entries)}
        return result

    async def motivate(self, user_id: str, situation: Optional[str] = None) -> Dict[str, Any]:
        base = await self._base_context(user_id)
        recent = base["recent_entries"]
        completed = await queries.get_user_goals(user_id, status="completed")
        context = {
            "mood": recent[0]["mood"] if recent else None,
            "streak": base["streak"],
            "recent_progress": f"level {base['user']['level']}, {len(completed)} goals completed",
            "goals_count": len(base["goals"]),
            "time_of_day": time_of_day(self.clock.now().hour),
            "situation": situation,
        }
        return await self.ai.generate_motivation(context)

    async def chat(
        self,
        user_id: str,
        message: str,
        history: Optional[List[Dict[str, str]]] = None
    ) -> Dict[str, Any]:
        if not message or not message.strip():
            raise ValidationError("Message is required", field="message")

        base = await self._base_context(user_id)
        user = base["user"]
        messages = list(history or [])[-MAX_CHAT_HISTORY:]
        messages.append({"role": "user", "content": message.strip()})

        user_data = {
            "level": user["level"],
            "xp": user["xp"],
            "streak": base["streak"],
            "goals_count": len(base["goals"]),
            "recent_mood": base["recent_entries"][0]["mood"] if base["recent_entries"] else None,
            "total_entries": await queries.count_entries(user_id),
        }
        logger.debug(f"Coach chat for user {user_id} with {len(messages)} messages")
        return await self.ai.chat_with_ai(messages, user_data)
