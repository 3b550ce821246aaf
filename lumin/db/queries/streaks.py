"""Streak record queries"""
import logging
from datetime import date
from typing import Optional

from lumin.db.connection import db

logger = logging.getLogger(__name__)


async def get_streak(user_id: str) -> Optional[dict]:
    """
    Get a user's streak record

    Returns:
        {
            'user_id': UUID,
            'current_streak': int,
            'longest_streak': int,
            'last_entry_date': date | None,
            ...
        }
        or None if the user has never logged an entry
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT id, user_id, current_streak, longest_streak, last_entry_date,
                       created_at, updated_at
                FROM streaks
                WHERE user_id = %s
                """,
                (user_id,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


async def save_streak(
    user_id: str,
    current_streak: int,
    longest_streak: int,
    last_entry_date: Optional[date]
) -> dict:
    """Create or update the user's streak record"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO streaks (user_id, current_streak, longest_streak, last_entry_date)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (user_id) DO UPDATE
                SET current_streak = EXCLUDED.current_streak,
                    longest_streak = EXCLUDED.longest_streak,
                    last_entry_date = EXCLUDED.last_entry_date,
                    updated_at = CURRENT_TIMESTAMP
                RETURNING id, user_id, current_streak, longest_streak, last_entry_date,
                          created_at, updated_at
                """,
                (user_id, current_streak, longest_streak, last_entry_date)
            )
            row = await cur.fetchone()
            await conn.commit()
            return dict(row)
