"""
GoalService - Goals, progress and milestones

Goals award XP when created, when a milestone is completed and when
progress reaches the target value.
"""

import logging
import math
from typing import Any, Dict, List

from lumin.db import queries
from lumin.exceptions import ConflictError, RecordNotFoundError, ValidationError
from lumin.gamification.xp_system import GOAL_CREATED_XP, award_xp
from lumin.models.goal import (
    GoalCreate,
    GoalFilters,
    GoalUpdate,
    goal_summary,
    milestone_document,
    progress_percentage,
)
from lumin.observability.metrics import goals_created_total
from lumin.utils.clock import Clock
from lumin.utils.ids import ensure_owner, parse_record_id
from lumin.utils.sanitize import sanitize_fields, sanitize_list

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "description", "metric", "unit", "notes")
MAX_PAGE_SIZE = 100


class GoalService:
    """
    Service for goals.

    Responsibilities:
    - Goal CRUD with sanitized text
    - Progress updates and completion rewards
    - Milestone completion
    - Goal statistics
    """

    def __init__(self, clock: Clock):
        self.clock = clock

    def _summary(self, goal: Dict[str, Any]) -> Dict[str, Any]:
        return goal_summary(goal, self.clock.today())

    async def create_goal(self, user_id: str, data: GoalCreate) -> Dict[str, Any]:
        document = sanitize_fields(data.model_dump(), TEXT_FIELDS)
        document["tags"] = sanitize_list(document["tags"])
        document["start_date"] = data.start_date or self.clock.today()
        if not document["title"]:
            raise ValidationError("Title cannot be empty", field="title")

        if data.target_date and data.target_date < document["start_date"]:
            raise ValidationError("Target date cannot be before the start date", field="target_date")
        if data.current_value >= data.target_value:
            raise ValidationError("Current value must be below the target value", field="current_value")

        milestones = []
        for milestone in data.milestones:
            document_milestone = sanitize_fields(milestone_document(milestone), ("title", "description"))
            if not document_milestone["title"]:
                raise ValidationError("Milestone title cannot be empty", field="milestones")
            milestones.append(document_milestone)
        document["milestones"] = milestones

        goal = await queries.create_goal(user_id, document)
        award = await award_xp(user_id, GOAL_CREATED_XP, "goal created")
        goals_created_total.labels(category=goal["category"]).inc()

        return {
            "goal": self._summary(goal),
            "xp_earned": GOAL_CREATED_XP,
            "leveled_up": award["leveled_up"],
        }

    async def list_goals(
        self,
        user_id: str,
        filters: GoalFilters,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 20
    ) -> Dict[str, Any]:
        page = max(1, page)
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        goals, total = await queries.list_goals(
            user_id,
            filters.model_dump(),
            sort_by=sort_by,
            sort_order=sort_order,
            limit=limit,
            offset=(page - 1) * limit,
        )
        total_pages = math.ceil(total / limit) if total else 0

        all_goals = await queries.get_user_goals(user_id)
        status_counts = {"active": 0, "completed": 0, "paused": 0, "abandoned": 0}
        for goal in all_goals:
            status_counts[goal["status"]] = status_counts.get(goal["status"], 0) + 1

        return {
            "goals": [self._summary(goal) for goal in goals],
            "pagination": {
                "current_page": page,
                "total_pages": total_pages,
                "total_goals": total,
                "has_more": page < total_pages,
            },
            "stats": {"total": len(all_goals), **status_counts},
        }

    async def get_goal(self, user_id: str, goal_id: str) -> Dict[str, Any]:
        return self._summary(await self._owned_goal(user_id, goal_id))

    async def _owned_goal(self, user_id: str, goal_id: str) -> Dict[str, Any]:
        goal_id = parse_record_id(goal_id, "Goal")
        goal = await queries.get_goal_by_id(goal_id)
        if not goal:
            raise RecordNotFoundError(f"Goal {goal_id} not found", record_type="Goal", record_id=goal_id)
        ensure_owner(goal, user_id, "Goal")
        return goal

    async def update_goal(self, user_id: str, goal_id: str, data: GoalUpdate) -> Dict[str, Any]:
        goal = await self._owned_goal(user_id, goal_id)
        fields = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k in ("description", "metric", "target_date", "notes")
        }
        fields = sanitize_fields(fields, TEXT_FIELDS)
        if "tags" in fields:
            fields["tags"] = sanitize_list(fields["tags"])

        if fields.get("status") == "completed" and goal["status"] != "completed":
            raise ValidationError(
                "Goals are completed by reaching the target value",
                field="status",
            )
        if goal["status"] == "completed" and fields.get("status", "completed") != "completed":
            raise ConflictError("Completed goals cannot be reopened", user_id=user_id)
        if "title" in fields and not fields["title"]:
            raise ValidationError("Title cannot be empty", field="title")

        target_date = fields.get("target_date", goal["target_date"])
        if target_date and target_date < goal["start_date"]:
            raise ValidationError("Target date cannot be before the start date", field="target_date")

        merged = {**goal, **fields}
        xp_earned = 0
        if (
            merged["status"] == "active"
            and goal["completed_at"] is None
            and merged["current_value"] >= merged["target_value"]
        ):
            fields["status"] = "completed"
            fields["completed_at"] = self.clock.now()
            xp_earned = goal["xp_reward"]

        updated = await queries.update_goal(str(goal["id"]), fields)
        leveled_up = False
        if xp_earned:
            leveled_up = (await award_xp(user_id, xp_earned, "goal completed"))["leveled_up"]

        return {"goal": self._summary(updated), "xp_earned": xp_earned, "leveled_up": leveled_up}

    async def update_progress(self, user_id: str, goal_id: str, current_value: float) -> Dict[str, Any]:
        """
        Set a goal's current value.

        Reaching the target completes the goal and awards its XP reward.
        Milestones with a target value that is now reached complete too.

        Raises:
            ConflictError: If the goal is completed or abandoned
        """
        if current_value < 0:
            raise ValidationError("Progress cannot be negative", field="current_value", value=current_value)

        goal = await self._owned_goal(user_id, goal_id)
        if goal["status"] in ("completed", "abandoned"):
            raise ConflictError(f"Goal is already {goal['status']}", user_id=user_id)

        now = self.clock.now()
        fields: Dict[str, Any] = {"current_value": current_value}
        xp_earned = 0

        milestones: List[Dict[str, Any]] = [dict(m) for m in goal["milestones"] or []]
        reached = []
        for milestone in milestones:
            target = milestone.get("target_value")
            if not milestone["completed"] and target is not None and current_value >= target:
                milestone["completed"] = True
                milestone["completed_at"] = now.isoformat()
                reached.append(milestone)
                xp_earned += milestone["xp_reward"]
        if reached:
            fields["milestones"] = milestones

        goal_completed = goal["status"] == "active" and current_value >= goal["target_value"]
        if goal_completed:
            fields["status"] = "completed"
            fields["completed_at"] = now
            xp_earned += goal["xp_reward"]

        updated = await queries.update_goal(str(goal["id"]), fields)

        leveled_up = False
        if xp_earned:
            leveled_up = (await award_xp(user_id, xp_earned, "goal progress"))["leveled_up"]
        if goal_completed:
            logger.info(f"User {user_id} completed goal {goal['id']}")

        return {
            "goal": self._summary(updated),
            "goal_completed": goal_completed,
            "milestones_completed": reached,
            "xp_earned": xp_earned,
            "leveled_up": leveled_up,
        }

    async def complete_milestone(self, user_id: str, goal_id: str, milestone_id: str) -> Dict[str, Any]:
        goal = await self._owned_goal(user_id, goal_id)
        milestones = [dict(m) for m in goal["milestones"] or []]

        milestone = next((m for m in milestones if m["id"] == milestone_id), None)
        if milestone is None:
            raise RecordNotFoundError(
                f"Milestone {milestone_id} not found on goal {goal['id']}",
                record_type="Milestone",
                record_id=milestone_id,
            )
        if milestone["completed"]:
            raise ConflictError("Milestone already completed", user_id=user_id)

        milestone["completed"] = True
        milestone["completed_at"] = self.clock.now().isoformat()

        updated = await queries.update_goal(str(goal["id"]), {"milestones": milestones})
        award = await award_xp(user_id, milestone["xp_reward"], "milestone completed")

        return {
            "goal": self._summary(updated),
            "milestone": milestone,
            "xp_earned": milestone["xp_reward"],
            "leveled_up": award["leveled_up"],
        }

    async def delete_goal(self, user_id: str, goal_id: str) -> None:
        goal = await self._owned_goal(user_id, goal_id)
        await queries.delete_goal(str(goal["id"]))
        logger.info(f"User {user_id} deleted goal {goal['id']}")

    async def get_stats(self, user_id: str) -> Dict[str, Any]:
        """Goal overview: counts by status and category, completion rate, average progress"""
        goals = [self._summary(goal) for goal in await queries.get_user_goals(user_id)]
        total = len(goals)

        by_status = {"active": 0, "completed": 0, "paused": 0, "abandoned": 0}
        by_category: Dict[str, Dict[str, int]] = {}
        for goal in goals:
            by_status[goal["status"]] = by_status.get(goal["status"], 0) + 1
            category = by_category.setdefault(goal["category"], {"total": 0, "completed": 0})
            category["total"] += 1
            if goal["status"] == "completed":
                category["completed"] += 1

        active = [g for g in goals if g["status"] == "active"]
        return {
            "total": total,
            "by_status": by_status,
            "by_category": by_category,
            "completion_rate": round(by_status["completed"] / total * 100) if total else 0,
            "avg_progress": (
                round(sum(progress_percentage(g["current_value"], g["target_value"]) for g in active) / len(active))
                if active else 0
            ),
            "overdue": sum(1 for g in goals if g["is_overdue"]),
        }
