"""
Database queries - Re-export all functions from one namespace.

Every function takes the connection to run on as its first argument, so
services can compose several queries inside one transaction.

Module organization:
- habits.py: Habit registry (create, list, update, soft delete)
- checkins.py: Daily check-in rows
- progress.py: Per-user streak / XP progress
- sessions.py: Bearer session lookup
"""

# Habit operations
from microhabits.db.queries.habits import (
    MUTABLE_HABIT_FIELDS,
    lock_user_habits,
    count_active_habits,
    insert_habit,
    get_active_habits,
    get_user_habit,
    update_habit,
    deactivate_habit,
)

# Check-in operations
from microhabits.db.queries.checkins import (
    get_checkin_for_day,
    insert_checkin,
    get_checkins_since,
)

# Progress operations
from microhabits.db.queries.progress import (
    get_progress,
    get_or_create_progress,
    update_progress,
)

# Session operations
from microhabits.db.queries.sessions import (
    get_session_user_id,
)

__all__ = [
    "MUTABLE_HABIT_FIELDS",
    "lock_user_habits",
    "count_active_habits",
    "insert_habit",
    "get_active_habits",
    "get_user_habit",
    "update_habit",
    "deactivate_habit",
    "get_checkin_for_day",
    "insert_checkin",
    "get_checkins_since",
    "get_progress",
    "get_or_create_progress",
    "update_progress",
    "get_session_user_id",
]
