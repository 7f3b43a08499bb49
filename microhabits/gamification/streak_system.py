"""
Daily Streak System

A streak counts consecutive UTC calendar days with a check-in.

Rules:
- First ever check-in starts a streak of 1
- Check-in the day after the last one continues the streak
- Any other gap resets the streak to 1 (never 0: checking in today always
  counts). A streak of 0 only exists before the first check-in.
- longest_streak never decreases
"""

from typing import Any, Dict, Mapping
from datetime import date, datetime, timedelta
import logging

logger = logging.getLogger(__name__)


def calculate_next_streak(progress: Mapping[str, Any], today: date) -> Dict[str, int]:
    """
    Compute streak values for a check-in made on `today`

    Callers must reject same-day check-ins before calling this; a
    last_checkin_date equal to today falls into the reset branch.

    Args:
        progress: Prior progress with current_streak, longest_streak,
            last_checkin_date (date or None)
        today: UTC calendar day of the new check-in

    Returns:
        {
            'current_streak': int,
            'longest_streak': int
        }
    """
    last_date = progress.get("last_checkin_date")
    if isinstance(last_date, datetime):
        last_date = last_date.date()

    if last_date is None:
        new_streak = 1
    elif last_date == today - timedelta(days=1):
        new_streak = progress["current_streak"] + 1
    else:
        new_streak = 1
        logger.debug(
            f"Streak reset: last check-in {last_date}, today {today}, "
            f"was {progress['current_streak']} days"
        )

    return {
        "current_streak": new_streak,
        "longest_streak": max(progress.get("longest_streak") or 0, new_streak),
    }
