"""Unit tests for ProgressService (microhabits/services/progress_service.py)"""
import pytest
from datetime import timedelta

from microhabits.services.progress_service import HISTORY_DAYS, ProgressService


@pytest.fixture
def service(store, fake_db):
    return ProgressService(fake_db)


# ============================================================================
# Progress Snapshot
# ============================================================================

@pytest.mark.asyncio
async def test_fresh_user_defaults(service, store, test_user_id, now):
    """Test first progress read creates a zeroed record"""
    progress = await service.get_progress(test_user_id, now)

    assert progress == {
        "current_streak": 0,
        "longest_streak": 0,
        "level": 1,
        "total_xp": 0,
        "percent_to_next_level": 0,
        "total_days_completed": 0,
        "last_checkin_date": None,
        "can_check_in_today": True,
    }
    assert test_user_id in store.progress


@pytest.mark.asyncio
async def test_cannot_check_in_after_todays_checkin(service, store, test_user_id, now, today):
    store.seed_progress(test_user_id, current_streak=1, longest_streak=1, total_xp=10,
                        total_days_completed=1, last_checkin_date=today)

    progress = await service.get_progress(test_user_id, now)

    assert progress["can_check_in_today"] is False
    assert progress["last_checkin_date"] == today


@pytest.mark.asyncio
async def test_can_check_in_next_day(service, store, test_user_id, now, today):
    store.seed_progress(test_user_id, current_streak=1, longest_streak=1, total_xp=10,
                        total_days_completed=1, last_checkin_date=today)

    progress = await service.get_progress(test_user_id, now + timedelta(days=1))

    assert progress["can_check_in_today"] is True


@pytest.mark.asyncio
async def test_level_derived_from_total_xp(service, store, test_user_id, now):
    """Test the stored current_level column is not trusted"""
    store.seed_progress(test_user_id, total_xp=120, current_level=1, total_days_completed=12)

    progress = await service.get_progress(test_user_id, now)

    assert progress["level"] == 3
    assert progress["percent_to_next_level"] == 40


# ============================================================================
# History
# ============================================================================

@pytest.mark.asyncio
async def test_history_newest_first(service, store, test_user_id, now, today):
    for offset in (5, 1, 3):
        store.seed_checkin(test_user_id, today - timedelta(days=offset))

    history = await service.get_history(test_user_id, now)

    assert [entry["checkin_date"] for entry in history] == [
        today - timedelta(days=1),
        today - timedelta(days=3),
        today - timedelta(days=5),
    ]
    assert set(history[0]) == {"checkin_date", "completed_at"}


@pytest.mark.asyncio
async def test_history_window(service, store, test_user_id, now, today):
    """Test check-ins older than the trailing window are excluded"""
    store.seed_checkin(test_user_id, today)
    store.seed_checkin(test_user_id, today - timedelta(days=HISTORY_DAYS))
    store.seed_checkin(test_user_id, today - timedelta(days=HISTORY_DAYS + 1))

    history = await service.get_history(test_user_id, now)

    assert [entry["checkin_date"] for entry in history] == [
        today,
        today - timedelta(days=HISTORY_DAYS),
    ]


@pytest.mark.asyncio
async def test_history_is_per_user(service, store, test_user_id, other_user_id, now, today):
    store.seed_checkin(other_user_id, today)

    assert await service.get_history(test_user_id, now) == []


@pytest.mark.asyncio
async def test_history_empty_for_new_user(service, test_user_id, now):
    assert await service.get_history(test_user_id, now) == []


@pytest.mark.asyncio
async def test_repeated_reads_create_one_row(service, store, test_user_id, now):
    """Test lazy creation happens once across repeated progress reads"""
    await service.get_progress(test_user_id, now)
    first_row = dict(store.progress[test_user_id])

    await service.get_progress(test_user_id, now)

    assert list(store.progress) == [test_user_id]
    assert store.progress[test_user_id]["id"] == first_row["id"]
