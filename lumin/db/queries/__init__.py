"""
Database queries - Re-export all functions so callers can use
`from lumin.db import queries` and `queries.<function>`.

Module organization:
- users.py: Accounts, XP, level, badges, profile and settings
- entries.py: Journal entries, filters and statistics
- goals.py: Goals with milestones
- streaks.py: Per-user streak records
- challenges.py: Daily challenge sets
"""

# User operations
from lumin.db.queries.users import (
    create_user,
    get_user_by_id,
    get_user_by_email,
    add_user_xp,
    set_user_level,
    set_user_streak,
    add_user_badges,
    update_user_profile,
    update_user_settings,
)

# Entry operations
from lumin.db.queries.entries import (
    create_entry,
    get_entry_by_id,
    get_entry_for_day,
    list_entries,
    update_entry,
    delete_entry,
    count_entries,
    get_entries_between,
    get_recent_entries,
    get_user_entries,
    get_previous_entry,
    get_mood_distribution,
)

# Goal operations
from lumin.db.queries.goals import (
    create_goal,
    get_goal_by_id,
    list_goals,
    get_user_goals,
    update_goal,
    delete_goal,
)

# Streak operations
from lumin.db.queries.streaks import (
    get_streak,
    save_streak,
)

# Challenge operations
from lumin.db.queries.challenges import (
    get_challenge_set,
    create_challenge_set,
    save_challenge_set,
    get_challenge_sets_since,
    get_all_challenge_sets,
)

__all__ = [
    # Users
    "create_user",
    "get_user_by_id",
    "get_user_by_email",
    "add_user_xp",
    "set_user_level",
    "set_user_streak",
    "add_user_badges",
    "update_user_profile",
    "update_user_settings",
    # Entries
    "create_entry",
    "get_entry_by_id",
    "get_entry_for_day",
    "list_entries",
    "update_entry",
    "delete_entry",
    "count_entries",
    "get_entries_between",
    "get_recent_entries",
    "get_user_entries",
    "get_previous_entry",
    "get_mood_distribution",
    # Goals
    "create_goal",
    "get_goal_by_id",
    "list_goals",
    "get_user_goals",
    "update_goal",
    "delete_goal",
    # Streaks
    "get_streak",
    "save_streak",
    # Challenges
    "get_challenge_set",
    "create_challenge_set",
    "save_challenge_set",
    "get_challenge_sets_since",
    "get_all_challenge_sets",
]
