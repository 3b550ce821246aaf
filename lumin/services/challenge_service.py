"""
ChallengeService - Daily challenge sets

A set of three challenges is generated lazily on the first request of each
calendar day. Challenges complete automatically from the day's entry or
manually through the API; completion is idempotent per day.
"""

import logging
import random
from datetime import timedelta
from typing import Any, Dict, List, Optional

from lumin.db import queries
from lumin.exceptions import ConflictError, RecordNotFoundError
from lumin.gamification import challenges as challenge_rules
from lumin.gamification.challenges import EntryContext
from lumin.gamification.xp_system import award_xp
from lumin.observability.metrics import challenges_completed_total
from lumin.utils.clock import Clock

logger = logging.getLogger(__name__)


def _with_status(challenge_set: Dict[str, Any]) -> Dict[str, Any]:
    items = challenge_set["challenges"]
    return {
        **challenge_set,
        "all_completed": bool(items) and all(c["completed"] for c in items),
    }


class ChallengeService:
    """
    Service for daily challenges.

    Responsibilities:
    - Generate-or-fetch today's challenge set
    - Auto-progress from journal entries
    - Manual completion with XP award
    - History and per-type statistics
    """

    def __init__(self, clock: Clock, rng: Optional[random.Random] = None):
        self.clock = clock
        self.rng = rng or random.Random()

    async def _get_or_create_today(self, user_id: str) -> Dict[str, Any]:
        today = self.clock.today()
        existing = await queries.get_challenge_set(user_id, today)
        if existing:
            return existing
        return await queries.create_challenge_set(
            user_id, today, challenge_rules.generate_challenges(self.rng)
        )

    async def get_today_challenges(self, user_id: str) -> Dict[str, Any]:
        return _with_status(await self._get_or_create_today(user_id))

    async def apply_entry(self, user_id: str, entry: EntryContext) -> Dict[str, Any]:
        """
        Progress today's challenges from a new entry.

        XP is reported, not awarded; the caller adds it to the entry's award.

        Returns:
            dict: {'completed': list of newly completed challenges, 'xp_earned': int}
        """
        challenge_set = await self._get_or_create_today(user_id)
        items: List[Dict[str, Any]] = challenge_set["challenges"]

        newly_completed = challenge_rules.apply_entry(items, entry, self.clock.now())
        if not newly_completed:
            return {"completed": [], "xp_earned": 0}

        summary = challenge_rules.summarize(items)
        await queries.save_challenge_set(
            str(challenge_set["id"]),
            items,
            summary["total_xp_earned"],
            summary["completed_count"],
        )

        xp_earned = sum(c["xp_reward"] for c in newly_completed)
        for challenge in newly_completed:
            challenges_completed_total.labels(challenge_type=challenge["type"], source="entry").inc()
        logger.info(
            f"Entry completed {len(newly_completed)} challenges for user {user_id} (+{xp_earned} XP)"
        )
        return {"completed": newly_completed, "xp_earned": xp_earned}

    async def complete_challenge(
        self,
        user_id: str,
        challenge_id: str,
        progress: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Manually complete one of today's challenges.

        Raises:
            RecordNotFoundError: If the challenge is not part of today's set
            ConflictError: If the challenge is already completed
        """
        challenge_set = await self._get_or_create_today(user_id)
        items = challenge_set["challenges"]

        challenge = next(
            (c for c in items if c["id"] == challenge_id or c["type"] == challenge_id),
            None,
        )
        if challenge is None:
            raise RecordNotFoundError(
                f"Challenge {challenge_id} is not in today's set",
                record_type="Challenge",
                record_id=challenge_id,
            )
        if challenge["completed"]:
            raise ConflictError("Challenge already completed", user_id=user_id)

        challenge["completed"] = True
        challenge["progress"] = progress if progress is not None else challenge["target"]
        challenge["completed_at"] = self.clock.now().isoformat()

        summary = challenge_rules.summarize(items)
        saved = await queries.save_challenge_set(
            str(challenge_set["id"]),
            items,
            summary["total_xp_earned"],
            summary["completed_count"],
        )
        award = await award_xp(user_id, challenge["xp_reward"], f"challenge {challenge['type']}")
        challenges_completed_total.labels(challenge_type=challenge["type"], source="manual").inc()

        return {
            "challenge": challenge,
            "challenges": _with_status(saved),
            "xp_earned": challenge["xp_reward"],
            "leveled_up": award["leveled_up"],
            "new_level": award["new_level"],
        }

    async def get_history(self, user_id: str, days: int = 30) -> Dict[str, Any]:
        since = self.clock.today() - timedelta(days=max(1, days) - 1)
        sets = await queries.get_challenge_sets_since(user_id, since)

        total_challenges = sum(len(s["challenges"]) for s in sets)
        completed = sum(s["completed_count"] for s in sets)
        perfect_days = sum(1 for s in sets if _with_status(s)["all_completed"])

        return {
            "history": [_with_status(s) for s in sets],
            "stats": {
                "total_days": len(sets),
                "total_challenges": total_challenges,
                "completed_challenges": completed,
                "total_xp_earned": sum(s["total_xp_earned"] for s in sets),
                "perfect_days": perfect_days,
                "completion_rate": round(completed / total_challenges * 100) if total_challenges else 0,
            },
        }

    async def get_stats(self, user_id: str) -> Dict[str, Any]:
        """Completion statistics per challenge type across all days"""
        sets = await queries.get_all_challenge_sets(user_id)

        by_type: Dict[str, Dict[str, Any]] = {}
        for challenge_set in sets:
            for challenge in challenge_set["challenges"]:
                stats = by_type.setdefault(
                    challenge["type"],
                    {"title": challenge["title"], "assigned": 0, "completed": 0, "xp_earned": 0},
                )
                stats["assigned"] += 1
                if challenge["completed"]:
                    stats["completed"] += 1
                    stats["xp_earned"] += challenge["xp_reward"]

        for stats in by_type.values():
            stats["completion_rate"] = round(stats["completed"] / stats["assigned"] * 100)

        total_assigned = sum(s["assigned"] for s in by_type.values())
        total_completed = sum(s["completed"] for s in by_type.values())
        return {
            "by_type": by_type,
            "total_assigned": total_assigned,
            "total_completed": total_completed,
            "total_xp_earned": sum(s["xp_earned"] for s in by_type.values()),
            "completion_rate": round(total_completed / total_assigned * 100) if total_assigned else 0,
        }
