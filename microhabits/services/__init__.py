"""
Service Layer Package

Business logic between the HTTP routes and the database queries.

- CheckInService: Daily check-in, streak and XP updates
- ProgressService: Progress snapshot and check-in history
- HabitService: Habit registry (capped, soft-deleted)
"""

from microhabits.services.container import ServiceContainer, get_container, init_container
from microhabits.services.checkin_service import CheckInService
from microhabits.services.progress_service import ProgressService
from microhabits.services.habit_service import HabitService, MAX_ACTIVE_HABITS

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
    "CheckInService",
    "ProgressService",
    "HabitService",
    "MAX_ACTIVE_HABITS",
]
