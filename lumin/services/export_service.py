"""
ExportService - Download a user's entries and goals

JSON exports return the stored records without the owner column. CSV
exports flatten them to one row per record for spreadsheets.
"""

import csv
import io
import logging
from typing import Any, Dict, List

from lumin.db import queries
from lumin.exceptions import RecordNotFoundError
from lumin.models.goal import progress_percentage
from lumin.utils.clock import Clock

logger = logging.getLogger(__name__)

ENTRY_CSV_COLUMNS = [
    "Date", "Title", "Mood", "Category", "Notes", "Tags", "Word Count", "Created At",
]
GOAL_CSV_COLUMNS = [
    "Title", "Description", "Category", "Priority", "Status", "Current Value",
    "Target Value", "Unit", "Progress %", "Target Date", "Completed At", "Created At",
]


def _public(record: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in record.items() if k != "user_id"}


def _iso(value: Any) -> str:
    return value.isoformat() if value is not None else ""


def _to_csv(columns: List[str], rows: List[Dict[str, Any]]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=columns, quoting=csv.QUOTE_ALL)
    writer.writeheader()
    writer.writerows(rows)
    return output.getvalue()


class ExportService:
    """Service for data export"""

    def __init__(self, clock: Clock):
        self.clock = clock

    def _document(self, key: str, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "export_date": self.clock.now(),
            "count": len(records),
            key: [_public(r) for r in records],
        }

    async def export_entries(self, user_id: str) -> Dict[str, Any]:
        entries = await queries.get_user_entries(user_id)
        logger.info(f"User {user_id} exported {len(entries)} entries")
        return self._document("entries", entries)

    async def export_goals(self, user_id: str) -> Dict[str, Any]:
        goals = await queries.get_user_goals(user_id)
        logger.info(f"User {user_id} exported {len(goals)} goals")
        return self._document("goals", goals)

    async def export_all(self, user_id: str) -> Dict[str, Any]:
        """Profile summary plus every entry and goal"""
        user = await queries.get_user_by_id(user_id)
        if not user:
            raise RecordNotFoundError(f"User {user_id} not found", record_type="User", record_id=user_id)
        entries = await queries.get_user_entries(user_id)
        goals = await queries.get_user_goals(user_id)
        streak = await queries.get_streak(user_id) or {}

        return {
            "export_date": self.clock.now(),
            "user": {
                "name": user["name"],
                "email": user["email"],
                "xp": user["xp"],
                "level": user["level"],
                "current_streak": streak.get("current_streak", 0),
                "longest_streak": streak.get("longest_streak", 0),
            },
            "entries": {"count": len(entries), "data": [_public(e) for e in entries]},
            "goals": {"count": len(goals), "data": [_public(g) for g in goals]},
        }

    async def entries_csv(self, user_id: str) -> str:
        """
        Entries as CSV text

        Raises:
            RecordNotFoundError: If the user has no entries
        """
        entries = await queries.get_user_entries(user_id)
        if not entries:
            raise RecordNotFoundError("No entries found to export", record_type="Entry")

        rows = [
            {
                "Date": _iso(entry["entry_day"]),
                "Title": entry.get("title") or "",
                "Mood": entry["mood"],
                "Category": entry["category"],
                "Notes": entry["notes"],
                "Tags": "; ".join(entry.get("tags") or []),
                "Word Count": entry.get("word_count") or 0,
                "Created At": _iso(entry["created_at"]),
            }
            for entry in entries
        ]
        return _to_csv(ENTRY_CSV_COLUMNS, rows)

    async def goals_csv(self, user_id: str) -> str:
        """
        Goals as CSV text

        Raises:
            RecordNotFoundError: If the user has no goals
        """
        goals = await queries.get_user_goals(user_id)
        if not goals:
            raise RecordNotFoundError("No goals found to export", record_type="Goal")

        rows = [
            {
                "Title": goal["title"],
                "Description": goal.get("description") or "",
                "Category": goal["category"],
                "Priority": goal["priority"],
                "Status": goal["status"],
                "Current Value": goal["current_value"],
                "Target Value": goal["target_value"],
                "Unit": goal.get("unit") or "",
                "Progress %": progress_percentage(goal["current_value"], goal["target_value"]),
                "Target Date": _iso(goal.get("target_date")),
                "Completed At": _iso(goal.get("completed_at")),
                "Created At": _iso(goal["created_at"]),
            }
            for goal in goals
        ]
        return _to_csv(GOAL_CSV_COLUMNS, rows)
