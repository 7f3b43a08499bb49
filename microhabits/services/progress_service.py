"""
ProgressService - Read-side views of streak, XP and check-in history
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import psycopg

from microhabits.db import queries
from microhabits.exceptions import wrap_external_exception
from microhabits.gamification import calculate_level_from_xp, date_only, utc_now

logger = logging.getLogger(__name__)

HISTORY_DAYS = 30


class ProgressService:
    """Service for progress snapshots and check-in history."""

    def __init__(self, db_connection):
        self.db = db_connection

    async def get_progress(self, user_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Get the user's current progress, creating a zeroed record on first access.

        Level and percentage are always derived from total_xp; the stored
        current_level column is ignored.

        Returns:
            dict: {
                'current_streak': int,
                'longest_streak': int,
                'level': int,
                'total_xp': int,
                'percent_to_next_level': int,
                'total_days_completed': int,
                'last_checkin_date': date | None,
                'can_check_in_today': bool
            }
        """
        today = date_only(now or utc_now())

        try:
            async with self.db.transaction() as conn:
                progress = await queries.get_or_create_progress(conn, user_id)
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="get_progress", user_id=user_id) from e

        level_info = calculate_level_from_xp(progress["total_xp"])
        last_checkin_date = progress["last_checkin_date"]

        return {
            "current_streak": progress["current_streak"],
            "longest_streak": progress["longest_streak"],
            "level": level_info["level"],
            "total_xp": progress["total_xp"],
            "percent_to_next_level": level_info["percent_to_next_level"],
            "total_days_completed": progress["total_days_completed"],
            "last_checkin_date": last_checkin_date,
            "can_check_in_today": last_checkin_date is None or date_only(last_checkin_date) != today,
        }

    async def get_history(self, user_id: str, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Get check-ins from the trailing HISTORY_DAYS days

        Returns:
            List of {'checkin_date': date, 'completed_at': datetime}, newest first
        """
        since = date_only(now or utc_now()) - timedelta(days=HISTORY_DAYS)

        try:
            async with self.db.connection() as conn:
                rows = await queries.get_checkins_since(conn, user_id, since)
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="get_history", user_id=user_id) from e

        return [
            {"checkin_date": row["checkin_date"], "completed_at": row["completed_at"]}
            for row in rows
        ]
