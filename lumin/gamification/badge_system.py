"""
Badge System

Badges are one-time unlocks recorded on the user with the XP they granted.
Conditions look at total entries, current streak and level.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List
import logging

from lumin.db import queries
from lumin.observability.metrics import badges_awarded_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeDefinition:
    name: str
    display_name: str
    description: str
    xp: int
    condition: Callable[[Dict[str, int]], bool]


BADGES: List[BadgeDefinition] = [
    BadgeDefinition(
        "first-entry", "📝 First Step", "Created your first journal entry", 25,
        lambda s: s["entry_count"] >= 1,
    ),
    BadgeDefinition(
        "consistent-writer", "✍️ Consistent Writer", "Wrote 10 journal entries", 50,
        lambda s: s["entry_count"] >= 10,
    ),
    BadgeDefinition(
        "prolific-author", "📚 Prolific Author", "Wrote 50 journal entries", 150,
        lambda s: s["entry_count"] >= 50,
    ),
    BadgeDefinition(
        "fire-starter", "🔥 Fire Starter", "Reached a 3-day streak", 50,
        lambda s: s["streak"] >= 3,
    ),
    BadgeDefinition(
        "week-warrior", "💪 Week Warrior", "Reached a 7-day streak", 100,
        lambda s: s["streak"] >= 7,
    ),
    BadgeDefinition(
        "month-master", "🏆 Month Master", "Reached a 30-day streak", 500,
        lambda s: s["streak"] >= 30,
    ),
    BadgeDefinition(
        "unstoppable", "⚡ Unstoppable", "Reached a 100-day streak", 2000,
        lambda s: s["streak"] >= 100,
    ),
    BadgeDefinition(
        "level-5", "⭐ Rising Star", "Reached level 5", 100,
        lambda s: s["level"] >= 5,
    ),
    BadgeDefinition(
        "level-10", "🌟 Shining Bright", "Reached level 10", 250,
        lambda s: s["level"] >= 10,
    ),
]

BADGES_BY_NAME = {badge.name: badge for badge in BADGES}


def find_new_badges(
    earned_names: set[str],
    entry_count: int,
    streak: int,
    level: int
) -> List[BadgeDefinition]:
    """Badges whose condition now holds and that the user does not have yet"""
    stats = {"entry_count": entry_count, "streak": streak, "level": level}
    return [
        badge for badge in BADGES
        if badge.name not in earned_names and badge.condition(stats)
    ]


async def check_and_award_badges(
    user: Dict[str, Any],
    entry_count: int,
    streak: int,
    level: int,
    now: datetime
) -> List[Dict[str, Any]]:
    """
    Unlock any newly satisfied badges for the user

    Badge XP is not added here; the caller awards the returned total so that
    the level is recalculated once.

    Returns:
        List of badge records that were appended to the user
    """
    earned = {badge["name"] for badge in user.get("badges") or []}
    new_badges = find_new_badges(earned, entry_count, streak, level)
    if not new_badges:
        return []

    records = [
        {
            "name": badge.name,
            "display_name": badge.display_name,
            "description": badge.description,
            "earned_at": now.isoformat(),
            "xp_awarded": badge.xp,
        }
        for badge in new_badges
    ]
    await queries.add_user_badges(str(user["id"]), records)
    for badge in new_badges:
        badges_awarded_total.labels(badge=badge.name).inc()

    logger.info(
        f"User {user['id']} unlocked badges: {', '.join(b.name for b in new_badges)}"
    )
    return records
