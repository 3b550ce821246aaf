"""
XP and Leveling System

Manages XP awards and level calculations.

Leveling Curve:
- Clearing level n costs floor(100 * 1.5^(n-1)) XP
  (level 1: 100, level 2: 150, level 3: 225, level 4: 337, ...)
- Reaching level n+1 requires the sum of the costs of levels 1..n
  (level 2 at 100 XP, level 3 at 250, level 4 at 475, level 5 at 812)

XP Award Rules:
- Journal entry: 50 XP base
  +25 for a detailed entry (100+ words)
  +10 for 3+ tags
  +5 for a geo-tagged entry
  +5 for a title
- Goal created: 50 XP
- Goal completed: the goal's xp_reward (default 200)
- Milestone completed: the milestone's xp_reward (default 25)
- Streak milestones (7, 14, 30, 50, 100 days): 5 XP per streak day
- Daily challenge completed: the challenge's xp_reward
- Badge unlocked: the badge's XP value
"""

import math
from typing import Any, Dict
import logging

from lumin.db import queries
from lumin.observability.metrics import level_ups_total, xp_awarded_total

logger = logging.getLogger(__name__)

BASE_LEVEL_XP = 100
LEVEL_GROWTH = 1.5

ENTRY_BASE_XP = 50
DETAILED_ENTRY_WORDS = 100
DETAILED_ENTRY_BONUS = 25
TAGGED_ENTRY_MIN_TAGS = 3
TAGGED_ENTRY_BONUS = 10
GEO_TAGGED_BONUS = 5
TITLE_BONUS = 5

GOAL_CREATED_XP = 50


def xp_for_level(level: int) -> int:
    """XP needed to clear the given level"""
    if level < 1:
        raise ValueError("level must be >= 1")
    return math.floor(BASE_LEVEL_XP * LEVEL_GROWTH ** (level - 1))


def total_xp_for_level(level: int) -> int:
    """Cumulative XP at which the given level starts"""
    return sum(xp_for_level(n) for n in range(1, level))


def calculate_level_from_xp(total_xp: int) -> Dict[str, Any]:
    """
    Calculate level and progress from cumulative XP

    Returns:
        {
            'current_level': int,
            'xp_in_current_level': int,
            'xp_for_current_level': int,
            'xp_to_next_level': int,
            'current_level_start_xp': int,
            'next_level_xp': int,
            'progress_percentage': int (0-100)
        }
    """
    total_xp = max(0, total_xp)
    level = 1
    level_start = 0

    while total_xp >= level_start + xp_for_level(level):
        level_start += xp_for_level(level)
        level += 1

    level_cost = xp_for_level(level)
    xp_in_level = total_xp - level_start

    return {
        "current_level": level,
        "xp_in_current_level": xp_in_level,
        "xp_for_current_level": level_cost,
        "xp_to_next_level": level_cost - xp_in_level,
        "current_level_start_xp": level_start,
        "next_level_xp": level_start + level_cost,
        "progress_percentage": math.floor(xp_in_level / level_cost * 100),
    }


def level_for_xp(total_xp: int) -> int:
    return calculate_level_from_xp(total_xp)["current_level"]


def check_level_up(old_xp: int, new_xp: int) -> Dict[str, Any]:
    old_level = level_for_xp(old_xp)
    new_level = level_for_xp(new_xp)
    return {
        "leveled_up": new_level > old_level,
        "old_level": old_level,
        "new_level": new_level,
    }


def calculate_entry_xp(entry: Dict[str, Any]) -> Dict[str, Any]:
    """
    Calculate XP for a journal entry

    Args:
        entry: Dict with word_count, tags, location, title

    Returns:
        {
            'base': int,
            'bonus': int,
            'total': int,
            'breakdown': [{'reason': str, 'xp': int}, ...]
        }
    """
    breakdown = [{"reason": "Base entry XP", "xp": ENTRY_BASE_XP}]

    if entry.get("word_count", 0) >= DETAILED_ENTRY_WORDS:
        breakdown.append({"reason": "Detailed entry (100+ words)", "xp": DETAILED_ENTRY_BONUS})

    if len(entry.get("tags") or []) >= TAGGED_ENTRY_MIN_TAGS:
        breakdown.append({"reason": "Well-categorized (3+ tags)", "xp": TAGGED_ENTRY_BONUS})

    location = entry.get("location") or {}
    if location.get("enabled"):
        breakdown.append({"reason": "Geo-tagged entry", "xp": GEO_TAGGED_BONUS})

    if entry.get("title"):
        breakdown.append({"reason": "Added title", "xp": TITLE_BONUS})

    bonus = sum(item["xp"] for item in breakdown[1:])
    return {
        "base": ENTRY_BASE_XP,
        "bonus": bonus,
        "total": ENTRY_BASE_XP + bonus,
        "breakdown": breakdown,
    }


async def award_xp(user_id: str, amount: int, reason: str) -> Dict[str, Any]:
    """
    Award XP to user and persist the derived level

    Args:
        user_id: User's id
        amount: XP to add; zero is a no-op and negative amounts are rejected
        reason: Human-readable description for the log

    Returns:
        {
            'xp_awarded': int,
            'new_total_xp': int,
            'old_total_xp': int,
            'leveled_up': bool,
            'old_level': int,
            'new_level': int,
            'xp_to_next_level': int
        }
    """
    if amount < 0:
        raise ValueError("XP awards cannot be negative")

    user = await queries.get_user_by_id(user_id)
    old_total_xp = user["xp"] if user else 0
    old_level = user["level"] if user else level_for_xp(old_total_xp)

    if amount == 0:
        level_info = calculate_level_from_xp(old_total_xp)
        return {
            "xp_awarded": 0,
            "new_total_xp": old_total_xp,
            "old_total_xp": old_total_xp,
            "leveled_up": False,
            "old_level": old_level,
            "new_level": old_level,
            "xp_to_next_level": level_info["xp_to_next_level"],
        }

    new_total_xp = await queries.add_user_xp(user_id, amount)
    level_info = calculate_level_from_xp(new_total_xp)
    new_level = level_info["current_level"]

    if new_level != old_level:
        await queries.set_user_level(user_id, new_level)
        level_ups_total.inc()
    xp_awarded_total.labels(reason=reason).inc(amount)

    logger.info(
        f"Awarded {amount} XP to user {user_id} for {reason}. "
        f"Total: {new_total_xp} XP, Level: {new_level}"
    )

    leveled_up = new_level > old_level
    if leveled_up:
        logger.info(f"User {user_id} leveled up from {old_level} to {new_level}!")

    return {
        "xp_awarded": amount,
        "new_total_xp": new_total_xp,
        "old_total_xp": old_total_xp,
        "leveled_up": leveled_up,
        "old_level": old_level,
        "new_level": new_level,
        "xp_to_next_level": level_info["xp_to_next_level"],
    }
