"""Habit registry database queries"""
import logging
from typing import Any, Optional
from uuid import uuid4

import psycopg
from psycopg import sql

logger = logging.getLogger(__name__)

HABIT_COLUMNS = "id, user_id, name, minimum_action, emoji, is_active, created_at"

# Columns a PATCH may touch
MUTABLE_HABIT_FIELDS = ("name", "minimum_action", "emoji")


async def lock_user_habits(conn: psycopg.AsyncConnection, user_id: str) -> None:
    """
    Serialize habit creation per user for the rest of the transaction

    Uses a transaction-scoped advisory lock so concurrent creates can't both
    pass the active-habit count check.
    """
    async with conn.cursor() as cur:
        await cur.execute("SELECT pg_advisory_xact_lock(hashtext(%s))", (f"habits:{user_id}",))


async def count_active_habits(conn: psycopg.AsyncConnection, user_id: str) -> int:
    """Count the user's active habits"""
    async with conn.cursor() as cur:
        await cur.execute(
            "SELECT COUNT(*) AS count FROM habits WHERE user_id = %s AND is_active = TRUE",
            (user_id,)
        )
        row = await cur.fetchone()
        return row["count"] if row else 0


async def insert_habit(
    conn: psycopg.AsyncConnection,
    user_id: str,
    name: str,
    minimum_action: str,
    emoji: Optional[str] = None
) -> dict:
    """
    Insert a new active habit

    Returns:
        The created habit row
    """
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            INSERT INTO habits (id, user_id, name, minimum_action, emoji, is_active)
            VALUES (%s, %s, %s, %s, %s, TRUE)
            RETURNING {HABIT_COLUMNS}
            """,
            (str(uuid4()), user_id, name, minimum_action, emoji)
        )
        row = await cur.fetchone()
        logger.info(f"Created habit {row['id']} for user {user_id}")
        return dict(row)


async def get_active_habits(conn: psycopg.AsyncConnection, user_id: str) -> list[dict]:
    """Get the user's active habits, oldest first"""
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            SELECT {HABIT_COLUMNS}
            FROM habits
            WHERE user_id = %s AND is_active = TRUE
            ORDER BY created_at ASC
            """,
            (user_id,)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


async def get_user_habit(
    conn: psycopg.AsyncConnection,
    user_id: str,
    habit_id: str
) -> Optional[dict]:
    """
    Get a habit only if it belongs to user_id

    Existence and ownership are checked in one lookup, so a habit owned by
    someone else is indistinguishable from a missing one.
    """
    async with conn.cursor() as cur:
        await cur.execute(
            f"SELECT {HABIT_COLUMNS} FROM habits WHERE id = %s AND user_id = %s",
            (habit_id, user_id)
        )
        row = await cur.fetchone()
        return dict(row) if row else None


async def update_habit(
    conn: psycopg.AsyncConnection,
    user_id: str,
    habit_id: str,
    changes: dict[str, Any]
) -> Optional[dict]:
    """
    Update mutable fields of an owned habit

    Args:
        changes: Subset of name / minimum_action / emoji. Other keys are
            rejected.

    Returns:
        Updated habit row, or None if not found / not owned
    """
    unknown = set(changes) - set(MUTABLE_HABIT_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update habit fields: {sorted(unknown)}")
    if not changes:
        return await get_user_habit(conn, user_id, habit_id)

    assignments = sql.SQL(", ").join(
        sql.SQL("{} = {}").format(sql.Identifier(field), sql.Placeholder(field))
        for field in changes
    )
    query = sql.SQL(
        "UPDATE habits SET {assignments} "
        "WHERE id = {habit_id} AND user_id = {user_id} "
        "RETURNING " + HABIT_COLUMNS
    ).format(
        assignments=assignments,
        habit_id=sql.Placeholder("habit_id"),
        user_id=sql.Placeholder("user_id"),
    )

    async with conn.cursor() as cur:
        await cur.execute(query, {**changes, "habit_id": habit_id, "user_id": user_id})
        row = await cur.fetchone()
        return dict(row) if row else None


async def deactivate_habit(
    conn: psycopg.AsyncConnection,
    user_id: str,
    habit_id: str
) -> bool:
    """
    Soft-delete an owned habit

    Returns:
        True if a row matched (even if it was already inactive)
    """
    async with conn.cursor() as cur:
        await cur.execute(
            "UPDATE habits SET is_active = FALSE WHERE id = %s AND user_id = %s RETURNING id",
            (habit_id, user_id)
        )
        row = await cur.fetchone()
        return row is not None
