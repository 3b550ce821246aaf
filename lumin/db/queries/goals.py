"""Goal queries"""
import logging
from typing import Optional

from psycopg import sql
from psycopg.types.json import Jsonb

from lumin.db.connection import db

logger = logging.getLogger(__name__)

GOAL_COLUMNS = """
    id, user_id, title, description, metric, target_value, current_value, unit,
    category, priority, start_date, target_date, milestones, status, completed_at,
    xp_reward, tags, notes, created_at, updated_at
"""

UPDATABLE_FIELDS = (
    "title", "description", "metric", "target_value", "current_value", "unit",
    "category", "priority", "target_date", "milestones", "status", "completed_at",
    "xp_reward", "tags", "notes",
)

# Sort keys exposed to the API mapped to SQL expressions
SORT_EXPRESSIONS = {
    "created_at": sql.SQL("created_at"),
    "updated_at": sql.SQL("updated_at"),
    "target_date": sql.SQL("target_date"),
    "title": sql.SQL("title"),
    "priority": sql.SQL("CASE priority WHEN 'high' THEN 3 WHEN 'medium' THEN 2 ELSE 1 END"),
    "progress": sql.SQL("current_value / NULLIF(target_value, 0)"),
}


def _adapt(column: str, value):
    if column == "milestones":
        return Jsonb(value or [])
    return value


async def create_goal(user_id: str, goal: dict) -> dict:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                INSERT INTO goals (
                    user_id, title, description, metric, target_value, current_value,
                    unit, category, priority, start_date, target_date, milestones,
                    status, xp_reward, tags, notes
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {GOAL_COLUMNS}
                """,
                (
                    user_id,
                    goal["title"],
                    goal.get("description"),
                    goal.get("metric"),
                    goal["target_value"],
                    goal.get("current_value", 0),
                    goal.get("unit", "units"),
                    goal.get("category", "other"),
                    goal.get("priority", "medium"),
                    goal["start_date"],
                    goal.get("target_date"),
                    Jsonb(goal.get("milestones", [])),
                    goal.get("status", "active"),
                    goal.get("xp_reward", 200),
                    goal.get("tags", []),
                    goal.get("notes"),
                )
            )
            row = await cur.fetchone()
            await conn.commit()
            logger.info(f"Created goal {row['id']} for user {user_id}")
            return dict(row)


async def get_goal_by_id(goal_id: str) -> Optional[dict]:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"SELECT {GOAL_COLUMNS} FROM goals WHERE id = %s",
                (goal_id,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


async def list_goals(
    user_id: str,
    filters: dict,
    sort_by: str,
    sort_order: str,
    limit: int,
    offset: int
) -> tuple[list[dict], int]:
    """
    Search and page through a user's goals

    Args:
        filters: Optional keys query (title/description substring), status,
                 category, priority
        sort_by: One of SORT_EXPRESSIONS
        sort_order: 'asc' or 'desc'
    """
    conditions = [sql.SQL("user_id = %s")]
    params: list = [user_id]

    if filters.get("query"):
        conditions.append(sql.SQL("(title ILIKE %s OR description ILIKE %s)"))
        pattern = f"%{filters['query']}%"
        params.extend([pattern, pattern])
    for column in ("status", "category", "priority"):
        if filters.get(column):
            conditions.append(sql.SQL("{} = %s").format(sql.Identifier(column)))
            params.append(filters[column])

    where = sql.SQL(" AND ").join(conditions)
    order = SORT_EXPRESSIONS.get(sort_by, SORT_EXPRESSIONS["created_at"])
    direction = sql.SQL("ASC") if sort_order == "asc" else sql.SQL("DESC")

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                sql.SQL("SELECT COUNT(*) AS total FROM goals WHERE {}").format(where),
                params
            )
            total = (await cur.fetchone())["total"]

            await cur.execute(
                sql.SQL(
                    "SELECT " + GOAL_COLUMNS + " FROM goals WHERE {where} "
                    "ORDER BY {order} {direction} NULLS LAST, created_at DESC "
                    "LIMIT %s OFFSET %s"
                ).format(where=where, order=order, direction=direction),
                [*params, limit, offset]
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows], total


async def get_user_goals(user_id: str, status: Optional[str] = None) -> list[dict]:
    """All of a user's goals, optionally restricted to one status"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            if status:
                await cur.execute(
                    f"""
                    SELECT {GOAL_COLUMNS} FROM goals
                    WHERE user_id = %s AND status = %s
                    ORDER BY created_at DESC
                    """,
                    (user_id, status)
                )
            else:
                await cur.execute(
                    f"SELECT {GOAL_COLUMNS} FROM goals WHERE user_id = %s ORDER BY created_at DESC",
                    (user_id,)
                )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def update_goal(goal_id: str, fields: dict) -> Optional[dict]:
    updates = {k: _adapt(k, v) for k, v in fields.items() if k in UPDATABLE_FIELDS}
    if not updates:
        return await get_goal_by_id(goal_id)

    assignments = sql.SQL(", ").join(
        sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder(column))
        for column in updates
    )
    query = sql.SQL(
        "UPDATE goals SET {assignments}, updated_at = CURRENT_TIMESTAMP "
        "WHERE id = {goal_id} RETURNING " + GOAL_COLUMNS
    ).format(assignments=assignments, goal_id=sql.Placeholder("goal_id"))

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, {**updates, "goal_id": goal_id})
            row = await cur.fetchone()
            await conn.commit()
            return dict(row) if row else None


async def delete_goal(goal_id: str) -> bool:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute("DELETE FROM goals WHERE id = %s", (goal_id,))
            deleted = cur.rowcount > 0
            await conn.commit()
            return deleted
