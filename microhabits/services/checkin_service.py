"""
CheckInService - Daily Check-in Business Logic

Enforces one check-in per user per UTC calendar day, then advances the
user's streak and XP in the same transaction as the check-in row.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import psycopg

from microhabits.db import queries
from microhabits.exceptions import AlreadyCheckedInError, wrap_external_exception
from microhabits.gamification import (
    calculate_level_from_xp,
    calculate_next_streak,
    date_only,
    get_xp_for_activity,
    utc_now,
)
from microhabits.observability.metrics import (
    checkin_conflicts_total,
    checkins_total,
    xp_awarded_total,
)

logger = logging.getLogger(__name__)


class CheckInService:
    """
    Service for daily check-ins.

    Responsibilities:
    - Reject a second check-in on the same calendar day
    - Compute the next streak and XP/level
    - Persist the check-in and the progress update atomically
    """

    def __init__(self, db_connection):
        """
        Initialize CheckInService.

        Args:
            db_connection: Database instance providing transaction()
        """
        self.db = db_connection

    async def check_in(self, user_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Record today's check-in for a user.

        Args:
            user_id: Authenticated user ID
            now: Check-in time (defaults to current UTC time)

        Returns:
            dict: {
                'current_streak': int,
                'longest_streak': int,
                'level': int,
                'total_xp': int,
                'percent_to_next_level': int,
                'total_days_completed': int,
                'xp_awarded': int
            }

        Raises:
            AlreadyCheckedInError: The user already checked in today
            DatabaseError: Storage failure; nothing was persisted
        """
        now = now or utc_now()
        today = date_only(now)

        try:
            async with self.db.transaction() as conn:
                # Existence check must precede the streak computation
                if await queries.get_checkin_for_day(conn, user_id, today):
                    checkin_conflicts_total.labels(source="precheck").inc()
                    raise AlreadyCheckedInError(
                        checkin_date=today,
                        user_id=user_id,
                        operation="check_in"
                    )

                progress = await queries.get_or_create_progress(conn, user_id, for_update=True)

                streak = calculate_next_streak(progress, today)
                xp_awarded = get_xp_for_activity("checkin")
                new_total_xp = progress["total_xp"] + xp_awarded
                level_info = calculate_level_from_xp(new_total_xp)

                try:
                    await queries.insert_checkin(conn, user_id, today, now)
                except AlreadyCheckedInError:
                    checkin_conflicts_total.labels(source="constraint").inc()
                    raise

                updated = await queries.update_progress(conn, user_id, {
                    "current_streak": streak["current_streak"],
                    "longest_streak": streak["longest_streak"],
                    "total_xp": new_total_xp,
                    "current_level": level_info["level"],
                    "total_days_completed": progress["total_days_completed"] + 1,
                    "last_checkin_date": today,
                })
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="check_in", user_id=user_id) from e

        checkins_total.inc()
        xp_awarded_total.labels(activity_type="checkin").inc(xp_awarded)

        previous_level = calculate_level_from_xp(progress["total_xp"])["level"]
        if level_info["level"] > previous_level:
            logger.info(f"User {user_id} leveled up from {previous_level} to {level_info['level']}!")

        logger.info(
            f"Check-in for user {user_id} on {today}: +{xp_awarded} XP, "
            f"total {new_total_xp} XP, streak {updated['current_streak']} days"
        )

        return {
            "current_streak": updated["current_streak"],
            "longest_streak": updated["longest_streak"],
            "level": level_info["level"],
            "total_xp": updated["total_xp"],
            "percent_to_next_level": level_info["percent_to_next_level"],
            "total_days_completed": updated["total_days_completed"],
            "xp_awarded": xp_awarded,
        }
