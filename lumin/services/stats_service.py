"""
StatsService - Dashboard and analytics

Level progress always comes from the XP curve in xp_system so the
dashboard and the award logic agree.
"""

import logging
from collections import Counter, defaultdict
from datetime import date, timedelta
from typing import Any, Dict, List

from lumin.db import queries
from lumin.exceptions import RecordNotFoundError
from lumin.gamification.streak_system import get_streak_info
from lumin.gamification.xp_system import calculate_level_from_xp
from lumin.models.goal import goal_summary
from lumin.models.user import public_user
from lumin.utils.clock import Clock, day_window

logger = logging.getLogger(__name__)


def _days(first_day: date, last_day: date) -> List[date]:
    return [first_day + timedelta(days=i) for i in range((last_day - first_day).days + 1)]


def _group_by_day(entries: List[Dict[str, Any]]) -> Dict[date, List[Dict[str, Any]]]:
    grouped: Dict[date, List[Dict[str, Any]]] = defaultdict(list)
    for entry in entries:
        grouped[entry["entry_day"]].append(entry)
    return grouped


class StatsService:
    """Read-only analytics over entries, goals and gamification state"""

    def __init__(self, clock: Clock):
        self.clock = clock

    async def get_dashboard(self, user_id: str) -> Dict[str, Any]:
        user = await queries.get_user_by_id(user_id)
        if not user:
            raise RecordNotFoundError(f"User {user_id} not found", record_type="User", record_id=user_id)

        today = self.clock.today()
        week_start, _ = day_window(self.clock, 7)

        total_entries = await queries.count_entries(user_id)
        week_entries = await queries.get_entries_between(user_id, week_start, today)
        recent_entries = await queries.get_recent_entries(user_id, limit=5)
        mood_distribution = await queries.get_mood_distribution(user_id)
        streak = await get_streak_info(user_id, self.clock)
        active_goals = await queries.get_user_goals(user_id, status="active")

        return {
            "user": public_user(user),
            "stats": {
                "total_entries": total_entries,
                "week_entries": len(week_entries),
                "current_streak": streak["current_streak"],
                "longest_streak": streak["longest_streak"],
                "total_xp": user["xp"],
                "badges_earned": len(user.get("badges") or []),
                "active_goals": len(active_goals),
            },
            "progress": calculate_level_from_xp(user["xp"]),
            "streak": streak,
            "recent_entries": recent_entries,
            "mood_distribution": mood_distribution,
            "top_goals": [goal_summary(goal, today) for goal in active_goals[:3]],
        }

    async def get_level_progress(self, user_id: str) -> Dict[str, Any]:
        user = await queries.get_user_by_id(user_id)
        if not user:
            raise RecordNotFoundError(f"User {user_id} not found", record_type="User", record_id=user_id)
        return {"xp": user["xp"], "level": user["level"], **calculate_level_from_xp(user["xp"])}

    async def get_streak(self, user_id: str) -> Dict[str, Any]:
        return await get_streak_info(user_id, self.clock)

    async def get_mood_trends(self, user_id: str, days: int = 30) -> Dict[str, Any]:
        """Per-day mood counts and average intensity over the trailing window"""
        first_day, last_day = day_window(self.clock, days)
        entries = await queries.get_entries_between(user_id, first_day, last_day)
        by_day = _group_by_day(entries)

        trend = []
        for day in _days(first_day, last_day):
            day_entries = by_day.get(day, [])
            trend.append({
                "date": day.isoformat(),
                "entries": len(day_entries),
                "moods": dict(Counter(e["mood"] for e in day_entries)),
                "avg_intensity": (
                    round(sum(e["mood_intensity"] for e in day_entries) / len(day_entries), 1)
                    if day_entries else None
                ),
            })

        return {
            "days": days,
            "trend": trend,
            "distribution": dict(Counter(e["mood"] for e in entries)),
        }

    async def get_weekly_activity(self, user_id: str) -> Dict[str, Any]:
        first_day, last_day = day_window(self.clock, 7)
        by_day = _group_by_day(await queries.get_entries_between(user_id, first_day, last_day))

        days = []
        for day in _days(first_day, last_day):
            day_entries = by_day.get(day, [])
            days.append({
                "date": day.isoformat(),
                "day_name": day.strftime("%a"),
                "entries": len(day_entries),
                "xp": sum(e["xp_awarded"] for e in day_entries),
                "moods": [e["mood"] for e in day_entries],
            })

        return {
            "days": days,
            "total_entries": sum(d["entries"] for d in days),
            "total_xp": sum(d["xp"] for d in days),
            "active_days": sum(1 for d in days if d["entries"]),
        }

    async def get_goal_consistency(self, user_id: str, days: int = 30) -> Dict[str, Any]:
        """
        Journaling consistency over the window alongside goal completion

        consistency_score is the share of days in the window with an entry.
        """
        first_day, last_day = day_window(self.clock, days)
        by_day = _group_by_day(await queries.get_entries_between(user_id, first_day, last_day))
        goals = await queries.get_user_goals(user_id)
        streak = await get_streak_info(user_id, self.clock)

        daily_efforts = [
            {
                "date": day.isoformat(),
                "entries": len(day_entries),
                "total_words": sum(e["word_count"] for e in day_entries),
                "total_xp": sum(e["xp_awarded"] for e in day_entries),
            }
            for day, day_entries in sorted(by_day.items())
        ]
        active_days = len(daily_efforts)
        completed_goals = sum(1 for g in goals if g["status"] == "completed")

        return {
            "consistency_score": round(active_days / days * 100),
            "active_days": active_days,
            "total_days": days,
            "current_streak": streak["current_streak"],
            "goals": {
                "active": sum(1 for g in goals if g["status"] == "active"),
                "total": len(goals),
                "completed": completed_goals,
                "completion_rate": round(completed_goals / len(goals) * 100) if goals else 0,
            },
            "daily_efforts": daily_efforts,
            "averages": {
                "words": round(sum(d["total_words"] for d in daily_efforts) / active_days) if active_days else 0,
                "xp": round(sum(d["total_xp"] for d in daily_efforts) / active_days) if active_days else 0,
            },
        }

    async def get_goal_timeline(self, user_id: str) -> Dict[str, Any]:
        """Goals grouped by the month they were created"""
        goals = await queries.get_user_goals(user_id)
        timeline: Dict[str, Dict[str, int]] = {}
        for goal in goals:
            month = goal["created_at"].strftime("%Y-%m")
            bucket = timeline.setdefault(month, {"created": 0, "completed": 0, "active": 0})
            bucket["created"] += 1
            if goal["status"] in ("completed", "active"):
                bucket[goal["status"]] += 1

        today = self.clock.today()
        return {
            "goals": [goal_summary(goal, today) for goal in goals],
            "timeline": dict(sorted(timeline.items())),
        }
