"""Session lookups for bearer-token authentication"""
from datetime import datetime
from typing import Optional

import psycopg


async def get_session_user_id(
    conn: psycopg.AsyncConnection,
    token: str,
    now: datetime
) -> Optional[str]:
    """
    Resolve a bearer token to its user ID

    Returns:
        user_id of an unexpired session, None otherwise
    """
    async with conn.cursor() as cur:
        await cur.execute(
            "SELECT user_id FROM sessions WHERE token = %s AND expires_at > %s",
            (token, now)
        )
        row = await cur.fetchone()
        return row["user_id"] if row else None
