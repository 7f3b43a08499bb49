"""API routes for microhabits"""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Request, Response, status

from microhabits.api.auth import get_current_user_id
from microhabits.api.middleware import limiter, CHECKIN_RATE_LIMIT, DEFAULT_RATE_LIMIT
from microhabits.api.models import (
    HabitCreateRequest, HabitUpdateRequest, HabitResponse,
    CheckInResponse, ProgressResponse, CheckInHistoryEntry,
    HealthCheckResponse, ErrorResponse,
)
from microhabits.db.connection import db
from microhabits.gamification import day_start, utc_now
from microhabits.services.container import ServiceContainer, get_container

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
}


def get_now() -> datetime:
    """Request time, overridable in tests"""
    return utc_now()


# ==========================================
# Habits
# ==========================================

@router.post(
    "/api/habits",
    response_model=HabitResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["habits"],
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
@limiter.limit(DEFAULT_RATE_LIMIT)
async def create_habit(
    request: Request,
    payload: HabitCreateRequest,
    user_id: str = Depends(get_current_user_id),
    services: ServiceContainer = Depends(get_container),
):
    """Create a habit (400 once the user has 3 active habits)"""
    habit = await services.habit_service.create_habit(
        user_id,
        name=payload.name,
        minimum_action=payload.minimum_action,
        emoji=payload.emoji,
    )
    return HabitResponse.model_validate(habit)


@router.get("/api/habits", response_model=list[HabitResponse], tags=["habits"], responses=ERROR_RESPONSES)
@limiter.limit(DEFAULT_RATE_LIMIT)
async def list_habits(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    services: ServiceContainer = Depends(get_container),
):
    """List the caller's active habits"""
    habits = await services.habit_service.list_habits(user_id)
    return [HabitResponse.model_validate(habit) for habit in habits]


@router.patch(
    "/api/habits/{habit_id}",
    response_model=HabitResponse,
    tags=["habits"],
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
@limiter.limit(DEFAULT_RATE_LIMIT)
async def update_habit(
    request: Request,
    habit_id: str,
    payload: HabitUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    services: ServiceContainer = Depends(get_container),
):
    """Update name / minimumAction / emoji of an owned habit"""
    habit = await services.habit_service.update_habit(
        user_id,
        habit_id,
        payload.model_dump(exclude_unset=True),
    )
    return HabitResponse.model_validate(habit)


@router.delete(
    "/api/habits/{habit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["habits"],
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
@limiter.limit(DEFAULT_RATE_LIMIT)
async def delete_habit(
    request: Request,
    habit_id: str,
    user_id: str = Depends(get_current_user_id),
    services: ServiceContainer = Depends(get_container),
):
    """Soft-delete an owned habit"""
    await services.habit_service.delete_habit(user_id, habit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==========================================
# Check-in & Progress
# ==========================================

@router.post(
    "/api/checkin",
    response_model=CheckInResponse,
    tags=["checkin"],
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
@limiter.limit(CHECKIN_RATE_LIMIT)
async def check_in(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    now: datetime = Depends(get_now),
    services: ServiceContainer = Depends(get_container),
):
    """Complete today's check-in (Rate limit: 10/minute)"""
    result = await services.checkin_service.check_in(user_id, now)
    return CheckInResponse(
        current_streak=result["current_streak"],
        longest_streak=result["longest_streak"],
        level=result["level"],
        total_xp=result["total_xp"],
        progress_to_next_level=result["percent_to_next_level"],
        total_days_completed=result["total_days_completed"],
        xp_awarded=result["xp_awarded"],
    )


@router.get("/api/progress", response_model=ProgressResponse, tags=["progress"], responses=ERROR_RESPONSES)
@limiter.limit(DEFAULT_RATE_LIMIT)
async def get_progress(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    now: datetime = Depends(get_now),
    services: ServiceContainer = Depends(get_container),
):
    """Current streak, level and whether today's check-in is still open"""
    progress = await services.progress_service.get_progress(user_id, now)
    last_checkin_date = progress["last_checkin_date"]
    return ProgressResponse(
        current_streak=progress["current_streak"],
        longest_streak=progress["longest_streak"],
        level=progress["level"],
        total_xp=progress["total_xp"],
        progress_to_next_level=progress["percent_to_next_level"],
        total_days_completed=progress["total_days_completed"],
        last_checkin_date=day_start(last_checkin_date) if last_checkin_date else None,
        can_checkin_today=progress["can_check_in_today"],
    )


@router.get(
    "/api/progress/history",
    response_model=list[CheckInHistoryEntry],
    tags=["progress"],
    responses=ERROR_RESPONSES,
)
@limiter.limit(DEFAULT_RATE_LIMIT)
async def get_progress_history(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    now: datetime = Depends(get_now),
    services: ServiceContainer = Depends(get_container),
):
    """Check-ins from the last 30 days, newest first"""
    history = await services.progress_service.get_history(user_id, now)
    return [CheckInHistoryEntry.model_validate(entry) for entry in history]


# ==========================================
# Service
# ==========================================

@router.get("/api/health", response_model=HealthCheckResponse, tags=["service"])
@limiter.limit(DEFAULT_RATE_LIMIT)
async def health_check(request: Request):
    """Health check endpoint (Rate limit: 60/minute for monitoring systems)"""
    try:
        async with db.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1")
                await cur.fetchone()

        db_status = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "disconnected"

    return HealthCheckResponse(
        status="healthy" if db_status == "connected" else "degraded",
        database=db_status,
        timestamp=utc_now()
    )
