"""
Gamification core for microhabits

- Calendar-day normalization (UTC)
- XP and leveling
- Daily streak tracking
"""

from microhabits.gamification.dates import date_only, day_start, utc_now
from microhabits.gamification.xp_system import (
    XP_PER_CHECKIN,
    XP_PER_LEVEL,
    calculate_level_from_xp,
    get_xp_for_activity,
)
from microhabits.gamification.streak_system import calculate_next_streak

__all__ = [
    "date_only",
    "day_start",
    "utc_now",
    "XP_PER_CHECKIN",
    "XP_PER_LEVEL",
    "calculate_level_from_xp",
    "get_xp_for_activity",
    "calculate_next_streak",
]
