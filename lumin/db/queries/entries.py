"""Journal entry queries"""
import logging
from datetime import date
from typing import Optional

from psycopg import sql
from psycopg.types.json import Jsonb

from lumin.db.connection import db

logger = logging.getLogger(__name__)

ENTRY_COLUMNS = """
    id, user_id, mood, mood_emoji, mood_intensity, title, notes, tags, category,
    location, is_private, word_count, entry_date, entry_day, xp_awarded,
    created_at, updated_at
"""

UPDATABLE_FIELDS = (
    "mood", "mood_emoji", "mood_intensity", "title", "notes", "tags", "category",
    "location", "is_private", "word_count", "xp_awarded",
)


def _adapt(column: str, value):
    if column == "location" and value is not None:
        return Jsonb(value)
    return value


async def create_entry(user_id: str, entry: dict) -> dict:
    """
    Insert a journal entry

    Args:
        user_id: Owner of the entry
        entry: Dict with mood, mood_emoji, mood_intensity, title, notes, tags,
               category, location, is_private, word_count, entry_date,
               entry_day, xp_awarded
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                INSERT INTO entries (
                    user_id, mood, mood_emoji, mood_intensity, title, notes, tags,
                    category, location, is_private, word_count, entry_date,
                    entry_day, xp_awarded
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {ENTRY_COLUMNS}
                """,
                (
                    user_id,
                    entry["mood"],
                    entry["mood_emoji"],
                    entry["mood_intensity"],
                    entry.get("title"),
                    entry["notes"],
                    entry.get("tags", []),
                    entry["category"],
                    _adapt("location", entry.get("location")),
                    entry.get("is_private", True),
                    entry["word_count"],
                    entry["entry_date"],
                    entry["entry_day"],
                    entry.get("xp_awarded", 0),
                )
            )
            row = await cur.fetchone()
            await conn.commit()
            logger.info(f"Created entry {row['id']} for user {user_id}")
            return dict(row)


async def get_entry_by_id(entry_id: str) -> Optional[dict]:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"SELECT {ENTRY_COLUMNS} FROM entries WHERE id = %s",
                (entry_id,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


async def get_entry_for_day(user_id: str, day: date) -> Optional[dict]:
    """Return the user's entry for a calendar day, if one exists"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {ENTRY_COLUMNS}
                FROM entries
                WHERE user_id = %s AND entry_day = %s
                ORDER BY created_at
                LIMIT 1
                """,
                (user_id, day)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


def _filter_clause(user_id: str, filters: dict) -> tuple[sql.Composed, list]:
    conditions = [sql.SQL("user_id = %s")]
    params: list = [user_id]

    if filters.get("mood"):
        conditions.append(sql.SQL("mood = %s"))
        params.append(filters["mood"])
    if filters.get("category"):
        conditions.append(sql.SQL("category = %s"))
        params.append(filters["category"])
    if filters.get("tags"):
        conditions.append(sql.SQL("tags && %s"))
        params.append(list(filters["tags"]))
    if filters.get("start_date"):
        conditions.append(sql.SQL("entry_day >= %s"))
        params.append(filters["start_date"])
    if filters.get("end_date"):
        conditions.append(sql.SQL("entry_day <= %s"))
        params.append(filters["end_date"])

    return sql.SQL(" AND ").join(conditions), params


async def list_entries(
    user_id: str,
    filters: dict,
    limit: int,
    offset: int
) -> tuple[list[dict], int]:
    """
    List entries newest first

    Args:
        filters: Optional keys mood, category, tags (any match),
                 start_date, end_date (inclusive calendar days)

    Returns:
        (entries for the page, total matching entries)
    """
    where, params = _filter_clause(user_id, filters)

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                sql.SQL("SELECT COUNT(*) AS total FROM entries WHERE {}").format(where),
                params
            )
            total = (await cur.fetchone())["total"]

            await cur.execute(
                sql.SQL(
                    "SELECT " + ENTRY_COLUMNS + " FROM entries WHERE {} "
                    "ORDER BY entry_date DESC, created_at DESC LIMIT %s OFFSET %s"
                ).format(where),
                [*params, limit, offset]
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows], total


async def update_entry(entry_id: str, fields: dict) -> Optional[dict]:
    updates = {k: _adapt(k, v) for k, v in fields.items() if k in UPDATABLE_FIELDS}
    if not updates:
        return await get_entry_by_id(entry_id)

    assignments = sql.SQL(", ").join(
        sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder(column))
        for column in updates
    )
    query = sql.SQL(
        "UPDATE entries SET {assignments}, updated_at = CURRENT_TIMESTAMP "
        "WHERE id = {entry_id} RETURNING " + ENTRY_COLUMNS
    ).format(assignments=assignments, entry_id=sql.Placeholder("entry_id"))

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, {**updates, "entry_id": entry_id})
            row = await cur.fetchone()
            await conn.commit()
            return dict(row) if row else None


async def delete_entry(entry_id: str) -> bool:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute("DELETE FROM entries WHERE id = %s", (entry_id,))
            deleted = cur.rowcount > 0
            await conn.commit()
            return deleted


async def count_entries(user_id: str) -> int:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "SELECT COUNT(*) AS total FROM entries WHERE user_id = %s",
                (user_id,)
            )
            return (await cur.fetchone())["total"]


async def get_entries_between(user_id: str, start_day: date, end_day: date) -> list[dict]:
    """All entries whose calendar day falls within [start_day, end_day], oldest first"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {ENTRY_COLUMNS}
                FROM entries
                WHERE user_id = %s AND entry_day BETWEEN %s AND %s
                ORDER BY entry_day, created_at
                """,
                (user_id, start_day, end_day)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def get_recent_entries(user_id: str, limit: int = 5) -> list[dict]:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {ENTRY_COLUMNS}
                FROM entries
                WHERE user_id = %s
                ORDER BY entry_date DESC, created_at DESC
                LIMIT %s
                """,
                (user_id, limit)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def get_user_entries(user_id: str) -> list[dict]:
    """Every entry the user has written, newest first"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {ENTRY_COLUMNS}
                FROM entries
                WHERE user_id = %s
                ORDER BY entry_date DESC, created_at DESC
                """,
                (user_id,)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def get_previous_entry(user_id: str, before_day: date) -> Optional[dict]:
    """Most recent entry strictly before the given calendar day"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {ENTRY_COLUMNS}
                FROM entries
                WHERE user_id = %s AND entry_day < %s
                ORDER BY entry_day DESC, created_at DESC
                LIMIT 1
                """,
                (user_id, before_day)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


async def get_mood_distribution(user_id: str) -> list[dict]:
    """Count of entries per mood, most frequent first"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT mood, COUNT(*) AS count
                FROM entries
                WHERE user_id = %s
                GROUP BY mood
                ORDER BY count DESC
                """,
                (user_id,)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]
