"""
HabitService - Habit Registry Business Logic

Handles the micro-habit lifecycle: create (capped per user), list, edit and
soft delete. Habits are never hard-deleted.
"""

import logging
from typing import Any, Dict, List, Optional

import psycopg

from microhabits.db import queries
from microhabits.exceptions import (
    HabitLimitExceededError,
    RecordNotFoundError,
    ValidationError,
    wrap_external_exception,
)
from microhabits.observability.metrics import habits_created_total

logger = logging.getLogger(__name__)

MAX_ACTIVE_HABITS = 3


class HabitService:
    """
    Service for the habit registry.

    Responsibilities:
    - Enforce the active-habit cap per user
    - Owner-only edits and soft deletes
    - Never reveal whether another user's habit exists
    """

    def __init__(self, db_connection):
        """
        Initialize HabitService.

        Args:
            db_connection: Database instance providing connection() and transaction()
        """
        self.db = db_connection

    async def create_habit(
        self,
        user_id: str,
        name: str,
        minimum_action: str,
        emoji: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a habit for a user.

        Raises:
            ValidationError: Blank name or minimum action
            HabitLimitExceededError: User already has MAX_ACTIVE_HABITS active habits
        """
        name = self._require_text("name", name)
        minimum_action = self._require_text("minimum_action", minimum_action)

        try:
            async with self.db.transaction() as conn:
                await queries.lock_user_habits(conn, user_id)

                active_count = await queries.count_active_habits(conn, user_id)
                if active_count >= MAX_ACTIVE_HABITS:
                    raise HabitLimitExceededError(
                        limit=MAX_ACTIVE_HABITS,
                        user_id=user_id,
                        operation="create_habit"
                    )

                habit = await queries.insert_habit(conn, user_id, name, minimum_action, emoji or None)
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="create_habit", user_id=user_id) from e

        habits_created_total.inc()
        return habit

    async def list_habits(self, user_id: str) -> List[Dict[str, Any]]:
        """Get the user's active habits, oldest first."""
        try:
            async with self.db.connection() as conn:
                return await queries.get_active_habits(conn, user_id)
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="list_habits", user_id=user_id) from e

    async def update_habit(
        self,
        user_id: str,
        habit_id: str,
        changes: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Update name / minimum_action / emoji of an owned habit.

        Args:
            changes: Fields to change. Unknown keys are ignored; emoji may be
                None or "" to clear it.

        Raises:
            RecordNotFoundError: Habit missing or owned by someone else
        """
        updates = {
            field: value
            for field, value in changes.items()
            if field in queries.MUTABLE_HABIT_FIELDS
        }
        for field in ("name", "minimum_action"):
            if field in updates:
                updates[field] = self._require_text(field, updates[field])
        if "emoji" in updates:
            updates["emoji"] = updates["emoji"] or None

        try:
            async with self.db.transaction() as conn:
                habit = await queries.update_habit(conn, user_id, habit_id, updates)
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="update_habit", user_id=user_id) from e

        if not habit:
            raise RecordNotFoundError(
                message=f"Habit {habit_id} not found for user",
                record_type="Habit",
                user_id=user_id,
                operation="update_habit"
            )

        logger.info(f"Updated habit {habit_id} for user {user_id}: {sorted(updates)}")
        return habit

    async def delete_habit(self, user_id: str, habit_id: str) -> None:
        """
        Soft-delete an owned habit.

        Raises:
            RecordNotFoundError: Habit missing or owned by someone else
        """
        try:
            async with self.db.transaction() as conn:
                found = await queries.deactivate_habit(conn, user_id, habit_id)
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="delete_habit", user_id=user_id) from e

        if not found:
            raise RecordNotFoundError(
                message=f"Habit {habit_id} not found for user",
                record_type="Habit",
                user_id=user_id,
                operation="delete_habit"
            )

        logger.info(f"Deactivated habit {habit_id} for user {user_id}")

    @staticmethod
    def _require_text(field: str, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(message="must not be blank", field=field, value=value)
        return value.strip()
