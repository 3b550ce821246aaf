"""User account, XP and profile queries"""
import logging
from datetime import date
from typing import Optional

from psycopg import sql
from psycopg.types.json import Jsonb

from lumin.db.connection import db

logger = logging.getLogger(__name__)

# Everything except password_hash
USER_COLUMNS = """
    id, name, email, xp, level, streak, last_entry_date, badges,
    avatar, bio, location, occupation, date_of_birth, settings,
    created_at, updated_at
"""

PROFILE_FIELDS = ("name", "avatar", "bio", "location", "occupation", "date_of_birth")


async def create_user(name: str, email: str, password_hash: str, settings: dict) -> dict:
    """Insert a new user and return it without the password hash"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                INSERT INTO users (name, email, password_hash, settings)
                VALUES (%s, %s, %s, %s)
                RETURNING {USER_COLUMNS}
                """,
                (name, email, password_hash, Jsonb(settings))
            )
            row = await cur.fetchone()
            await conn.commit()
            logger.info(f"Created user {row['id']}")
            return dict(row)


async def get_user_by_id(user_id: str) -> Optional[dict]:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = %s",
                (user_id,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


async def get_user_by_email(email: str) -> Optional[dict]:
    """Fetch user including password_hash, for credential checks"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"SELECT {USER_COLUMNS}, password_hash FROM users WHERE email = %s",
                (email,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


async def add_user_xp(user_id: str, amount: int) -> int:
    """
    Atomically add XP to a user

    Returns:
        New cumulative XP total
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                UPDATE users
                SET xp = xp + %s, updated_at = CURRENT_TIMESTAMP
                WHERE id = %s
                RETURNING xp
                """,
                (amount, user_id)
            )
            row = await cur.fetchone()
            await conn.commit()
            return row["xp"] if row else 0


async def set_user_level(user_id: str, level: int) -> None:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "UPDATE users SET level = %s, updated_at = CURRENT_TIMESTAMP WHERE id = %s",
                (level, user_id)
            )
            await conn.commit()


async def set_user_streak(user_id: str, streak: int, last_entry_date: Optional[date]) -> None:
    """Mirror the streak counter onto the user record"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                UPDATE users
                SET streak = %s, last_entry_date = %s, updated_at = CURRENT_TIMESTAMP
                WHERE id = %s
                """,
                (streak, last_entry_date, user_id)
            )
            await conn.commit()


async def add_user_badges(user_id: str, badges: list[dict]) -> None:
    """Append earned badges to the user's badge list"""
    if not badges:
        return
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                UPDATE users
                SET badges = badges || %s, updated_at = CURRENT_TIMESTAMP
                WHERE id = %s
                """,
                (Jsonb(badges), user_id)
            )
            await conn.commit()


async def update_user_profile(user_id: str, fields: dict) -> Optional[dict]:
    """Update whitelisted profile fields and return the user"""
    updates = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
    if not updates:
        return await get_user_by_id(user_id)

    assignments = sql.SQL(", ").join(
        sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder(column))
        for column in updates
    )
    query = sql.SQL(
        "UPDATE users SET {assignments}, updated_at = CURRENT_TIMESTAMP "
        "WHERE id = {user_id} RETURNING " + USER_COLUMNS
    ).format(assignments=assignments, user_id=sql.Placeholder("user_id"))

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, {**updates, "user_id": user_id})
            row = await cur.fetchone()
            await conn.commit()
            return dict(row) if row else None


async def update_user_settings(user_id: str, settings: dict) -> Optional[dict]:
    """Merge settings keys into the stored settings document"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                UPDATE users
                SET settings = settings || %s, updated_at = CURRENT_TIMESTAMP
                WHERE id = %s
                RETURNING {USER_COLUMNS}
                """,
                (Jsonb(settings), user_id)
            )
            row = await cur.fetchone()
            await conn.commit()
            return dict(row) if row else None
