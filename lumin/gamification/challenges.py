"""
Daily Challenges

Each day a user gets three distinct challenges drawn from CHALLENGE_TEMPLATES.
Most complete automatically when the day's journal entry satisfies them;
any of them can also be completed manually through the API.
"""

import random
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)

DAILY_CHALLENGE_COUNT = 3

GRATITUDE_KEYWORDS = ("grateful", "thankful", "appreciate", "blessing", "fortunate")

EARLY_BIRD_BEFORE_HOUR = 9
NIGHT_OWL_FROM_HOUR = 22

CHALLENGE_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "word-count": {
        "title": "📝 Wordsmith",
        "description": "Write an entry with at least 150 words",
        "target": 150,
        "xp_reward": 50,
    },
    "early-bird": {
        "title": "🌅 Early Bird",
        "description": "Journal before 9:00 AM",
        "target": 1,
        "xp_reward": 60,
    },
    "night-owl": {
        "title": "🦉 Night Owl",
        "description": "Journal after 10:00 PM",
        "target": 1,
        "xp_reward": 60,
    },
    "tag-master": {
        "title": "🏷️ Tag Master",
        "description": "Use at least 3 tags in your entry",
        "target": 3,
        "xp_reward": 40,
    },
    "streak-keeper": {
        "title": "🔥 Streak Keeper",
        "description": "Maintain your daily streak",
        "target": 1,
        "xp_reward": 70,
    },
    "mood-variety": {
        "title": "🎭 Mood Explorer",
        "description": "Log a mood different from yesterday",
        "target": 1,
        "xp_reward": 45,
    },
    "detailed-entry": {
        "title": "📖 Detailed Chronicler",
        "description": "Write a detailed entry (200+ words)",
        "target": 200,
        "xp_reward": 80,
    },
    "grateful": {
        "title": "🙏 Gratitude Practice",
        "description": "Mention something you're grateful for",
        "target": 1,
        "xp_reward": 55,
    },
    "reflection": {
        "title": "💭 Deep Thinker",
        "description": "Reflect on your day with meaningful insights",
        "target": 1,
        "xp_reward": 65,
    },
}


@dataclass
class EntryContext:
    """What a new entry tells the challenge evaluator"""
    word_count: int
    tags: List[str]
    notes: str
    category: str
    mood: str
    created_at: datetime
    streak_continued: bool = False
    previous_mood: Optional[str] = None


def generate_challenges(rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    """Build a fresh set of distinct challenges for one day"""
    rng = rng or random.Random()
    types = rng.sample(sorted(CHALLENGE_TEMPLATES), DAILY_CHALLENGE_COUNT)
    return [new_challenge(challenge_type) for challenge_type in types]


def new_challenge(challenge_type: str) -> Dict[str, Any]:
    template = CHALLENGE_TEMPLATES[challenge_type]
    return {
        "id": str(uuid4()),
        "type": challenge_type,
        "title": template["title"],
        "description": template["description"],
        "target": template["target"],
        "progress": 0,
        "completed": False,
        "completed_at": None,
        "xp_reward": template["xp_reward"],
    }


def evaluate_challenge(challenge: Dict[str, Any], entry: EntryContext) -> Optional[int]:
    """
    Check one challenge against an entry

    Returns:
        Progress value to record when the entry completes the challenge,
        otherwise None
    """
    challenge_type = challenge["type"]
    target = challenge["target"]

    if challenge_type in ("word-count", "detailed-entry"):
        return entry.word_count if entry.word_count >= target else None
    if challenge_type == "early-bird":
        return 1 if entry.created_at.hour < EARLY_BIRD_BEFORE_HOUR else None
    if challenge_type == "night-owl":
        return 1 if entry.created_at.hour >= NIGHT_OWL_FROM_HOUR else None
    if challenge_type == "tag-master":
        return len(entry.tags) if len(entry.tags) >= target else None
    if challenge_type == "grateful":
        notes = entry.notes.lower()
        return 1 if any(word in notes for word in GRATITUDE_KEYWORDS) else None
    if challenge_type == "streak-keeper":
        return 1 if entry.streak_continued else None
    if challenge_type == "mood-variety":
        if entry.previous_mood is not None and entry.previous_mood != entry.mood:
            return 1
        return None
    if challenge_type == "reflection":
        return 1 if entry.category == "reflection" else None
    return None


def apply_entry(
    challenges: List[Dict[str, Any]],
    entry: EntryContext,
    now: datetime
) -> List[Dict[str, Any]]:
    """
    Mark challenges completed by an entry

    Mutates the challenge dicts in place. Already completed challenges are
    left untouched.

    Returns:
        The challenges completed by this call
    """
    newly_completed = []
    for challenge in challenges:
        if challenge["completed"]:
            continue
        progress = evaluate_challenge(challenge, entry)
        if progress is None:
            continue
        challenge["progress"] = progress
        challenge["completed"] = True
        challenge["completed_at"] = now.isoformat()
        newly_completed.append(challenge)
    return newly_completed


def summarize(challenges: List[Dict[str, Any]]) -> Dict[str, int]:
    """Completed count and XP earned across a day's challenges"""
    completed = [c for c in challenges if c["completed"]]
    return {
        "completed_count": len(completed),
        "total_xp_earned": sum(c["xp_reward"] for c in completed),
    }
