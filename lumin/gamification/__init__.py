"""
Gamification system for LUMIN

Provides:
- XP and leveling
- Daily journaling streaks
- Badges
- Daily challenges
"""

from lumin.gamification.xp_system import (
    xp_for_level,
    total_xp_for_level,
    calculate_level_from_xp,
    level_for_xp,
    check_level_up,
    calculate_entry_xp,
    award_xp,
)
from lumin.gamification.streak_system import (
    StreakState,
    advance_streak,
    update_streak,
    get_streak_info,
)
from lumin.gamification.badge_system import (
    BADGES,
    find_new_badges,
    check_and_award_badges,
)
from lumin.gamification.challenges import (
    CHALLENGE_TEMPLATES,
    EntryContext,
    generate_challenges,
    apply_entry,
)

__all__ = [
    # XP System
    "xp_for_level",
    "total_xp_for_level",
    "calculate_level_from_xp",
    "level_for_xp",
    "check_level_up",
    "calculate_entry_xp",
    "award_xp",
    # Streak System
    "StreakState",
    "advance_streak",
    "update_streak",
    "get_streak_info",
    # Badges
    "BADGES",
    "find_new_badges",
    "check_and_award_badges",
    # Challenges
    "CHALLENGE_TEMPLATES",
    "EntryContext",
    "generate_challenges",
    "apply_entry",
]
