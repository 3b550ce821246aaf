"""Daily challenge queries"""
import logging
from datetime import date
from typing import Optional

from psycopg.types.json import Jsonb

from lumin.db.connection import db

logger = logging.getLogger(__name__)

CHALLENGE_COLUMNS = """
    id, user_id, challenge_date, challenges, total_xp_earned, completed_count,
    created_at, updated_at
"""


async def get_challenge_set(user_id: str, day: date) -> Optional[dict]:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {CHALLENGE_COLUMNS}
                FROM daily_challenges
                WHERE user_id = %s AND challenge_date = %s
                """,
                (user_id, day)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


async def create_challenge_set(user_id: str, day: date, challenges: list[dict]) -> dict:
    """
    Store the day's challenge set

    If another request already generated the set for this day, the existing
    set is returned unchanged.
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                INSERT INTO daily_challenges (user_id, challenge_date, challenges)
                VALUES (%s, %s, %s)
                ON CONFLICT (user_id, challenge_date) DO NOTHING
                RETURNING {CHALLENGE_COLUMNS}
                """,
                (user_id, day, Jsonb(challenges))
            )
            row = await cur.fetchone()
            await conn.commit()

            if row is None:
                await cur.execute(
                    f"""
                    SELECT {CHALLENGE_COLUMNS}
                    FROM daily_challenges
                    WHERE user_id = %s AND challenge_date = %s
                    """,
                    (user_id, day)
                )
                row = await cur.fetchone()
            else:
                logger.info(f"Generated {len(challenges)} challenges for user {user_id} on {day}")

            return dict(row)


async def save_challenge_set(
    set_id: str,
    challenges: list[dict],
    total_xp_earned: int,
    completed_count: int
) -> dict:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                UPDATE daily_challenges
                SET challenges = %s,
                    total_xp_earned = %s,
                    completed_count = %s,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = %s
                RETURNING {CHALLENGE_COLUMNS}
                """,
                (Jsonb(challenges), total_xp_earned, completed_count, set_id)
            )
            row = await cur.fetchone()
            await conn.commit()
            return dict(row)


async def get_challenge_sets_since(user_id: str, since_day: date) -> list[dict]:
    """Challenge sets from since_day onwards, newest first"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {CHALLENGE_COLUMNS}
                FROM daily_challenges
                WHERE user_id = %s AND challenge_date >= %s
                ORDER BY challenge_date DESC
                """,
                (user_id, since_day)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def get_all_challenge_sets(user_id: str) -> list[dict]:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {CHALLENGE_COLUMNS}
                FROM daily_challenges
                WHERE user_id = %s
                ORDER BY challenge_date DESC
                """,
                (user_id,)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]
