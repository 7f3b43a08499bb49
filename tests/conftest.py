"""Global test fixtures and utilities for microhabits tests"""
import pytest
from contextlib import asynccontextmanager
from datetime import date, datetime, timedelta, timezone
from copy import deepcopy
from itertools import count
from uuid import uuid4

from microhabits.db import queries
from microhabits.exceptions import AlreadyCheckedInError


# ============================================================================
# Database Fixtures
# ============================================================================

class FakeDatabase:
    """
    Stands in for microhabits.db.connection.Database without a pool

    transaction() restores the attached store when the block raises, like a
    rollback.
    """

    def __init__(self, store=None):
        self.conn = object()
        self.store = store
        self.transactions = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def connection(self):
        yield self.conn

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        snapshot = self.store.snapshot() if self.store is not None else None
        try:
            yield self.conn
        except Exception:
            if snapshot is not None:
                self.store.restore(snapshot)
            self.rollbacks += 1
            raise


class FakeStore:
    """
    In-memory replacement for the query layer

    Mirrors the table constraints the services rely on: one check-in per
    user per day, one progress row per user, owner-scoped habit lookups.
    """

    def __init__(self):
        self.habits = {}
        self.checkins = []
        self.progress = {}
        self.sessions = {}
        self.locked_users = []
        self._tick = count()

    # Habits

    async def lock_user_habits(self, conn, user_id):
        self.locked_users.append(user_id)

    async def count_active_habits(self, conn, user_id):
        return sum(1 for h in self.habits.values() if h["user_id"] == user_id and h["is_active"])

    async def insert_habit(self, conn, user_id, name, minimum_action, emoji=None):
        habit = {
            "id": str(uuid4()),
            "user_id": user_id,
            "name": name,
            "minimum_action": minimum_action,
            "emoji": emoji,
            "is_active": True,
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=next(self._tick)),
        }
        self.habits[habit["id"]] = habit
        return dict(habit)

    async def get_active_habits(self, conn, user_id):
        habits = [h for h in self.habits.values() if h["user_id"] == user_id and h["is_active"]]
        return [dict(h) for h in sorted(habits, key=lambda h: h["created_at"])]

    async def get_user_habit(self, conn, user_id, habit_id):
        habit = self.habits.get(habit_id)
        if habit is None or habit["user_id"] != user_id:
            return None
        return dict(habit)

    async def update_habit(self, conn, user_id, habit_id, changes):
        unknown = set(changes) - set(queries.MUTABLE_HABIT_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update habit fields: {sorted(unknown)}")
        if await self.get_user_habit(conn, user_id, habit_id) is None:
            return None
        self.habits[habit_id].update(changes)
        return dict(self.habits[habit_id])

    async def deactivate_habit(self, conn, user_id, habit_id):
        if await self.get_user_habit(conn, user_id, habit_id) is None:
            return False
        self.habits[habit_id]["is_active"] = False
        return True

    # Check-ins

    async def get_checkin_for_day(self, conn, user_id, checkin_date):
        for row in self.checkins:
            if row["user_id"] == user_id and row["checkin_date"] == checkin_date:
                return dict(row)
        return None

    async def insert_checkin(self, conn, user_id, checkin_date, completed_at):
        for row in self.checkins:
            if row["user_id"] == user_id and row["checkin_date"] == checkin_date:
                raise AlreadyCheckedInError(
                    message="Concurrent check-in lost the uniqueness race",
                    checkin_date=checkin_date,
                    user_id=user_id,
                    operation="insert_checkin"
                )
        row = {
            "id": str(uuid4()),
            "user_id": user_id,
            "checkin_date": checkin_date,
            "completed_at": completed_at,
        }
        self.checkins.append(row)
        return dict(row)

    async def get_checkins_since(self, conn, user_id, since):
        rows = [r for r in self.checkins if r["user_id"] == user_id and r["checkin_date"] >= since]
        return [dict(r) for r in sorted(rows, key=lambda r: r["checkin_date"], reverse=True)]

    # Progress

    async def get_progress(self, conn, user_id, for_update=False):
        row = self.progress.get(user_id)
        return dict(row) if row else None

    async def get_or_create_progress(self, conn, user_id, for_update=False):
        if user_id not in self.progress:
            self.progress[user_id] = {
                "id": str(uuid4()),
                "user_id": user_id,
                "current_streak": 0,
                "longest_streak": 0,
                "total_xp": 0,
                "current_level": 1,
                "total_days_completed": 0,
                "last_checkin_date": None,
            }
        return dict(self.progress[user_id])

    async def update_progress(self, conn, user_id, progress_data):
        self.progress[user_id].update(progress_data)
        return dict(self.progress[user_id])

    # Sessions

    async def get_session_user_id(self, conn, token, now):
        session = self.sessions.get(token)
        if session is None or session["expires_at"] <= now:
            return None
        return session["user_id"]

    # Helpers

    def seed_progress(self, user_id, **values):
        """Create a progress row with overrides (e.g. total_xp=45)"""
        row = {
            "id": str(uuid4()),
            "user_id": user_id,
            "current_streak": 0,
            "longest_streak": 0,
            "total_xp": 0,
            "current_level": 1,
            "total_days_completed": 0,
            "last_checkin_date": None,
        }
        row.update(values)
        self.progress[user_id] = row
        return row

    def seed_checkin(self, user_id, checkin_date):
        row = {
            "id": str(uuid4()),
            "user_id": user_id,
            "checkin_date": checkin_date,
            "completed_at": datetime.combine(checkin_date, datetime.min.time(), tzinfo=timezone.utc)
            + timedelta(hours=8),
        }
        self.checkins.append(row)
        return row

    def snapshot(self):
        return deepcopy((self.habits, self.checkins, self.progress))

    def restore(self, snapshot):
        self.habits, self.checkins, self.progress = deepcopy(snapshot)

    def install(self, monkeypatch):
        """Route microhabits.db.queries calls to this store"""
        for name in (
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
        ):
            monkeypatch.setattr(queries, name, getattr(self, name))


@pytest.fixture
def store(monkeypatch):
    """In-memory data store wired into the query layer"""
    fake_store = FakeStore()
    fake_store.install(monkeypatch)
    return fake_store


@pytest.fixture
def fake_db(store):
    """Database stand-in handing out a dummy connection"""
    return FakeDatabase(store)


# ============================================================================
# User & Time Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def other_user_id():
    """A second user for isolation tests"""
    return "user-456"


@pytest.fixture
def now():
    """Fixed UTC 'now' for check-in tests"""
    return datetime(2024, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def today(now):
    return date(2024, 3, 10)
