"""
EntryService - Journal entries and the rewards they trigger

Creating the day's entry drives most of the gamification loop:
entry XP, streak update, challenge progress, badges and level.
"""

import logging
import math
from typing import Any, Dict, Optional

from lumin.db import queries
from lumin.exceptions import ConflictError, RecordNotFoundError
from lumin.gamification.badge_system import check_and_award_badges
from lumin.gamification.challenges import EntryContext
from lumin.gamification.streak_system import update_streak
from lumin.gamification.xp_system import award_xp, calculate_entry_xp, level_for_xp
from lumin.models.entry import (
    MOOD_EMOJIS,
    EntryCreate,
    EntryFilters,
    EntryUpdate,
    count_words,
    entry_document,
)
from lumin.observability.metrics import entries_created_total
from lumin.utils.clock import Clock
from lumin.utils.ids import ensure_owner, parse_record_id

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class EntryService:
    """
    Service for journal entries.

    Responsibilities:
    - One entry per user per calendar day
    - Entry XP, streak, challenge and badge rewards
    - Listing with filters and pagination
    - Updates that recalculate entry XP
    """

    def __init__(self, clock: Clock, challenge_service):
        self.clock = clock
        self.challenges = challenge_service

    async def create_entry(self, user_id: str, data: EntryCreate) -> Dict[str, Any]:
        """
        Create today's entry and apply all rewards.

        Returns:
            dict: {
                'entry': dict,
                'rewards': {
                    'xp': int, 'xp_breakdown': list, 'leveled_up': bool,
                    'old_level': int, 'new_level': int, 'streak': dict,
                    'new_badges': list, 'challenges_completed': list,
                    'challenge_xp': int, 'badge_xp': int
                }
            }

        Raises:
            ConflictError: If the user already wrote an entry today
        """
        today = self.clock.today()
        now = self.clock.now()

        if await queries.get_entry_for_day(user_id, today):
            raise ConflictError(
                "You've already created an entry today. Come back tomorrow!",
                user_id=user_id,
                operation="create_entry",
                context={"has_entry_today": True},
            )

        user = await queries.get_user_by_id(user_id)
        if not user:
            raise RecordNotFoundError(f"User {user_id} not found", record_type="User", record_id=user_id)

        document = entry_document(data, now, today)
        entry_xp = calculate_entry_xp(document)
        document["xp_awarded"] = entry_xp["total"]
        entry = await queries.create_entry(user_id, document)

        streak = await update_streak(user_id, self.clock)

        previous_entry = await queries.get_previous_entry(user_id, today)
        context = EntryContext(
            word_count=entry["word_count"],
            tags=list(entry["tags"] or []),
            notes=entry["notes"],
            category=entry["category"],
            mood=entry["mood"],
            created_at=now,
            streak_continued=streak["increased"] and streak["previous_streak"] > 0,
            previous_mood=previous_entry["mood"] if previous_entry else None,
        )
        challenge_result = await self.challenges.apply_entry(user_id, context)

        earned_xp = entry_xp["total"] + streak["xp_bonus"] + challenge_result["xp_earned"]

        # Badges see the level the user reaches with this entry's XP
        entry_count = await queries.count_entries(user_id)
        new_badges = await check_and_award_badges(
            user,
            entry_count=entry_count,
            streak=streak["current_streak"],
            level=level_for_xp(user["xp"] + earned_xp),
            now=now,
        )
        badge_xp = sum(badge["xp_awarded"] for badge in new_badges)

        award = await award_xp(user_id, earned_xp + badge_xp, "journal entry")
        entries_created_total.labels(mood=entry["mood"]).inc()

        logger.info(
            f"User {user_id} created entry {entry['id']}: +{award['xp_awarded']} XP, "
            f"streak {streak['current_streak']}"
        )

        return {
            "entry": entry,
            "rewards": {
                "xp": award["xp_awarded"],
                "xp_breakdown": entry_xp["breakdown"],
                "leveled_up": award["leveled_up"],
                "old_level": award["old_level"],
                "new_level": award["new_level"],
                "streak": {
                    "current": streak["current_streak"],
                    "longest": streak["longest_streak"],
                    "milestone_reached": streak["milestone_reached"],
                    "bonus_xp": streak["xp_bonus"],
                    "message": streak["message"],
                },
                "new_badges": new_badges,
                "challenges_completed": challenge_result["completed"],
                "challenge_xp": challenge_result["xp_earned"],
                "badge_xp": badge_xp,
            },
        }

    async def get_today_entry(self, user_id: str) -> Dict[str, Any]:
        entry = await queries.get_entry_for_day(user_id, self.clock.today())
        return {"has_entry_today": entry is not None, "entry": entry}

    async def list_entries(
        self,
        user_id: str,
        filters: EntryFilters,
        page: int = 1,
        limit: int = 10
    ) -> Dict[str, Any]:
        page = max(1, page)
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        entries, total = await queries.list_entries(
            user_id,
            filters.model_dump(),
            limit=limit,
            offset=(page - 1) * limit,
        )
        total_pages = math.ceil(total / limit) if total else 0
        return {
            "entries": entries,
            "pagination": {
                "current_page": page,
                "total_pages": total_pages,
                "total_entries": total,
                "has_more": page < total_pages,
            },
        }

    async def get_entry(self, user_id: str, entry_id: str) -> Dict[str, Any]:
        entry_id = parse_record_id(entry_id, "Entry")
        entry = await queries.get_entry_by_id(entry_id)
        if not entry:
            raise RecordNotFoundError(f"Entry {entry_id} not found", record_type="Entry", record_id=entry_id)
        ensure_owner(entry, user_id, "Entry")
        return entry

    async def update_entry(self, user_id: str, entry_id: str, data: EntryUpdate) -> Dict[str, Any]:
        """
        Update an entry and recalculate its XP.

        XP never decreases: when the new total is lower, the user's XP and the
        entry's recorded award are left as they were.
        """
        entry = await self.get_entry(user_id, entry_id)
        # Only title and location may be cleared with an explicit null
        fields = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k in ("title", "location")
        }

        if "mood" in fields:
            fields["mood_emoji"] = MOOD_EMOJIS[fields["mood"]]
        if "notes" in fields:
            fields["word_count"] = count_words(fields["notes"])

        merged = {**entry, **fields}
        new_total = calculate_entry_xp(merged)["total"]
        xp_change = max(0, new_total - entry["xp_awarded"])
        if xp_change:
            fields["xp_awarded"] = new_total

        updated = await queries.update_entry(str(entry["id"]), fields)

        award: Optional[Dict[str, Any]] = None
        if xp_change:
            award = await award_xp(user_id, xp_change, "entry update")

        return {
            "entry": updated,
            "xp_change": xp_change,
            "leveled_up": bool(award and award["leveled_up"]),
        }

    async def delete_entry(self, user_id: str, entry_id: str) -> None:
        """Delete an entry. Earned XP, streak and badges are kept."""
        entry = await self.get_entry(user_id, entry_id)
        await queries.delete_entry(str(entry["id"]))
        logger.info(f"User {user_id} deleted entry {entry['id']}")
