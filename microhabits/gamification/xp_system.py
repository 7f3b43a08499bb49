"""
XP and Leveling System

Levels partition cumulative XP into fixed-size bands:
- Every level is XP_PER_LEVEL (50) XP wide
- Levels are 1-indexed: 0-49 XP is level 1, 50-99 XP is level 2, ...

XP Award Rules:
- Daily check-in: 10 XP

total_xp is the only stored source of truth. Level and progress are always
derived here, never trusted from a cached column.
"""

from typing import Dict
import math

XP_PER_LEVEL = 50
XP_PER_CHECKIN = 10


def calculate_level_from_xp(total_xp: int) -> Dict[str, int]:
    """
    Calculate level and in-level progress from total XP

    Returns:
        {
            'level': int,
            'xp_into_level': int,
            'xp_needed_for_level': int,
            'percent_to_next_level': int (0-100)
        }

    Raises:
        ValueError: If total_xp is negative
    """
    if total_xp < 0:
        raise ValueError(f"total_xp must be non-negative, got {total_xp}")

    level = total_xp // XP_PER_LEVEL + 1
    xp_into_level = total_xp - (level - 1) * XP_PER_LEVEL

    # Round half up, not Python's banker's rounding
    percent = math.floor(100 * xp_into_level / XP_PER_LEVEL + 0.5)

    return {
        "level": level,
        "xp_into_level": xp_into_level,
        "xp_needed_for_level": XP_PER_LEVEL,
        "percent_to_next_level": percent,
    }


def get_xp_for_activity(activity_type: str) -> int:
    """XP amount awarded for an activity type"""
    base_xp = {
        "checkin": XP_PER_CHECKIN,
    }
    if activity_type not in base_xp:
        raise ValueError(f"Unknown activity type: {activity_type}")
    return base_xp[activity_type]
