"""
Daily Journaling Streak System

A streak counts consecutive calendar days with at least one journal entry.

Rules (applied on the first entry of a day):
- Last entry yesterday: streak continues (+1)
- Last entry today: no change (already counted)
- Any larger gap, or no previous entry: streak restarts at 1
- longest_streak always tracks the best current_streak ever reached

Milestones at 7, 14, 30, 50 and 100 days award 5 XP per streak day.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Optional
import logging

from lumin.db import queries
from lumin.observability.metrics import streak_milestones_total
from lumin.utils.clock import Clock

logger = logging.getLogger(__name__)

STREAK_MILESTONES = (7, 14, 30, 50, 100)
MILESTONE_XP_PER_DAY = 5


@dataclass
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0
    last_entry_date: Optional[date] = None


@dataclass
class StreakUpdate:
    state: StreakState
    previous_streak: int
    increased: bool
    broken: bool
    milestone_reached: bool
    xp_bonus: int
    message: str


def advance_streak(state: StreakState, today: date) -> StreakUpdate:
    """
    Apply a qualifying activity on `today` to a streak

    Pure function: the input state is not mutated.
    """
    last = state.last_entry_date
    previous = state.current_streak
    broken = False

    if last is not None and last >= today:
        # Already counted; a last date ahead of today is treated the same way
        current = previous
        last_date = last
        message = f"Streak continues! Day {current} 🔥"
    elif last == today - timedelta(days=1):
        current = previous + 1
        last_date = today
        message = f"Streak continues! Day {current} 🔥"
    elif last is None:
        current = 1
        last_date = today
        message = "Streak started! Day 1 🎉"
    else:
        broken = previous > 0
        current = 1
        last_date = today
        message = f"Streak reset. Previous: {previous} days. Starting fresh! Day 1 💪"

    increased = current > previous
    milestone_reached = increased and current in STREAK_MILESTONES
    xp_bonus = current * MILESTONE_XP_PER_DAY if milestone_reached else 0
    if milestone_reached:
        message += f"\n🏆 {current}-day milestone reached! +{xp_bonus} XP"

    new_state = StreakState(
        current_streak=current,
        longest_streak=max(state.longest_streak, current),
        last_entry_date=last_date,
    )
    return StreakUpdate(
        state=new_state,
        previous_streak=previous,
        increased=increased,
        broken=broken,
        milestone_reached=milestone_reached,
        xp_bonus=xp_bonus,
        message=message,
    )


def _state_from_row(row: Optional[Dict[str, Any]]) -> StreakState:
    if not row:
        return StreakState()
    return StreakState(
        current_streak=row["current_streak"],
        longest_streak=row["longest_streak"],
        last_entry_date=row["last_entry_date"],
    )


async def update_streak(user_id: str, clock: Clock) -> Dict[str, Any]:
    """
    Record today's qualifying entry for the user's streak

    Creates the streak record lazily and mirrors the counter onto the user.

    Returns:
        {
            'current_streak': int,
            'longest_streak': int,
            'previous_streak': int,
            'increased': bool,
            'broken': bool,
            'milestone_reached': bool,
            'xp_bonus': int,
            'message': str
        }
    """
    today = clock.today()
    row = await queries.get_streak(user_id)
    update = advance_streak(_state_from_row(row), today)
    state = update.state

    await queries.save_streak(
        user_id,
        state.current_streak,
        state.longest_streak,
        state.last_entry_date,
    )
    await queries.set_user_streak(user_id, state.current_streak, state.last_entry_date)

    logger.info(
        f"Updated streak for user {user_id}: "
        f"{update.previous_streak} → {state.current_streak} days"
    )
    if update.broken:
        logger.info(f"User {user_id} streak broken, was {update.previous_streak}")
    if update.milestone_reached:
        streak_milestones_total.labels(milestone=str(state.current_streak)).inc()

    return {
        "current_streak": state.current_streak,
        "longest_streak": state.longest_streak,
        "previous_streak": update.previous_streak,
        "increased": update.increased,
        "broken": update.broken,
        "milestone_reached": update.milestone_reached,
        "xp_bonus": update.xp_bonus,
        "message": update.message,
    }


async def get_streak_info(user_id: str, clock: Clock) -> Dict[str, Any]:
    """
    Get the user's streak with its current liveness

    A streak is alive while the last entry was today or yesterday. A streak
    that is no longer alive is reported with current_streak 0 but the stored
    record is left untouched until the next entry resets it.
    """
    state = _state_from_row(await queries.get_streak(user_id))
    today = clock.today()
    last = state.last_entry_date

    is_alive = last is not None and last >= today - timedelta(days=1)
    logged_today = last is not None and last >= today

    return {
        "current_streak": state.current_streak if is_alive else 0,
        "longest_streak": state.longest_streak,
        "last_entry_date": last,
        "is_active": is_alive,
        "logged_today": logged_today,
        "next_milestone": next_milestone(state.current_streak if is_alive else 0),
    }


def next_milestone(current_streak: int) -> Optional[int]:
    for milestone in STREAK_MILESTONES:
        if milestone > current_streak:
            return milestone
    return None
