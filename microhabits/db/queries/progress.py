"""User progress database queries"""
import logging
from typing import Optional
from uuid import uuid4

import psycopg

logger = logging.getLogger(__name__)

PROGRESS_COLUMNS = (
    "id, user_id, current_streak, longest_streak, total_xp, current_level, "
    "total_days_completed, last_checkin_date"
)


async def get_progress(
    conn: psycopg.AsyncConnection,
    user_id: str,
    for_update: bool = False
) -> Optional[dict]:
    """
    Get the user's progress row

    Args:
        for_update: Lock the row until the surrounding transaction ends
    """
    query = f"SELECT {PROGRESS_COLUMNS} FROM user_progress WHERE user_id = %s"
    if for_update:
        query += " FOR UPDATE"

    async with conn.cursor() as cur:
        await cur.execute(query, (user_id,))
        row = await cur.fetchone()
        return dict(row) if row else None


async def get_or_create_progress(
    conn: psycopg.AsyncConnection,
    user_id: str,
    for_update: bool = False
) -> dict:
    """
    Get user progress (creates zeroed defaults if it doesn't exist)

    Creation is idempotent: concurrent callers race on the user_id unique
    constraint and all read back the same row.

    Returns:
        {
            'id': str,
            'user_id': str,
            'current_streak': int,
            'longest_streak': int,
            'total_xp': int,
            'current_level': int,
            'total_days_completed': int,
            'last_checkin_date': date | None
        }
    """
    progress = await get_progress(conn, user_id, for_update=for_update)
    if progress:
        return progress

    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO user_progress (
                id, user_id, current_streak, longest_streak, total_xp,
                current_level, total_days_completed, last_checkin_date
            )
            VALUES (%s, %s, 0, 0, 0, 1, 0, NULL)
            ON CONFLICT (user_id) DO NOTHING
            """,
            (str(uuid4()), user_id)
        )
        if cur.rowcount:
            logger.info(f"Created progress record for user {user_id}")

    return await get_progress(conn, user_id, for_update=for_update)


async def update_progress(
    conn: psycopg.AsyncConnection,
    user_id: str,
    progress_data: dict
) -> dict:
    """
    Update user progress after a check-in

    Args:
        progress_data: Dict with current_streak, longest_streak, total_xp,
            current_level, total_days_completed, last_checkin_date

    Returns:
        The updated row
    """
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            UPDATE user_progress
            SET current_streak = %s,
                longest_streak = %s,
                total_xp = %s,
                current_level = %s,
                total_days_completed = %s,
                last_checkin_date = %s
            WHERE user_id = %s
            RETURNING {PROGRESS_COLUMNS}
            """,
            (
                progress_data["current_streak"],
                progress_data["longest_streak"],
                progress_data["total_xp"],
                progress_data["current_level"],
                progress_data["total_days_completed"],
                progress_data["last_checkin_date"],
                user_id
            )
        )
        row = await cur.fetchone()
        return dict(row)
