"""Daily check-in database queries"""
import logging
from datetime import date, datetime
from typing import Optional
from uuid import uuid4

import psycopg
from psycopg import errors

from microhabits.exceptions import AlreadyCheckedInError

logger = logging.getLogger(__name__)

CHECKIN_COLUMNS = "id, user_id, checkin_date, completed_at"


async def get_checkin_for_day(
    conn: psycopg.AsyncConnection,
    user_id: str,
    checkin_date: date
) -> Optional[dict]:
    """Get the user's check-in for a calendar day, if any"""
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            SELECT {CHECKIN_COLUMNS}
            FROM daily_checkins
            WHERE user_id = %s AND checkin_date = %s
            """,
            (user_id, checkin_date)
        )
        row = await cur.fetchone()
        return dict(row) if row else None


async def insert_checkin(
    conn: psycopg.AsyncConnection,
    user_id: str,
    checkin_date: date,
    completed_at: datetime
) -> dict:
    """
    Insert a daily check-in row

    The (user_id, checkin_date) unique constraint is the final arbiter for
    concurrent check-ins: the losing insert is reported as
    AlreadyCheckedInError, same as the pre-check.

    Raises:
        AlreadyCheckedInError: A check-in for that day already exists
    """
    try:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                INSERT INTO daily_checkins (id, user_id, checkin_date, completed_at)
                VALUES (%s, %s, %s, %s)
                RETURNING {CHECKIN_COLUMNS}
                """,
                (str(uuid4()), user_id, checkin_date, completed_at)
            )
            row = await cur.fetchone()
            return dict(row)
    except errors.UniqueViolation as e:
        raise AlreadyCheckedInError(
            message="Concurrent check-in lost the uniqueness race",
            checkin_date=checkin_date,
            user_id=user_id,
            operation="insert_checkin",
            cause=e
        ) from e


async def get_checkins_since(
    conn: psycopg.AsyncConnection,
    user_id: str,
    since: date
) -> list[dict]:
    """
    Get check-ins on or after `since`

    Returns:
        Check-ins ordered by checkin_date DESC
    """
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            SELECT {CHECKIN_COLUMNS}
            FROM daily_checkins
            WHERE user_id = %s AND checkin_date >= %s
            ORDER BY checkin_date DESC
            """,
            (user_id, since)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]
