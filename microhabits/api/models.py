"""Pydantic models for API request/response validation

Field names are snake_case in Python and camelCase on the wire.
"""
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase JSON"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==========================================
# Habits
# ==========================================

class HabitCreateRequest(CamelModel):
    """Request to create a habit"""
    name: str = Field(..., min_length=1, max_length=120, description="Habit name")
    minimum_action: str = Field(
        ...,
        min_length=1,
        max_length=240,
        description="Smallest action that counts, e.g. 'Read one page'"
    )
    emoji: Optional[str] = Field(default=None, max_length=16, description="Optional emoji")


class HabitUpdateRequest(CamelModel):
    """Partial habit update; only fields present in the body are changed"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    minimum_action: Optional[str] = Field(default=None, min_length=1, max_length=240)
    emoji: Optional[str] = Field(default=None, max_length=16, description="null clears the emoji")


class HabitResponse(CamelModel):
    """Habit as returned to its owner"""
    id: str
    name: str
    minimum_action: str
    emoji: Optional[str] = None
    is_active: bool
    created_at: datetime


# ==========================================
# Check-in & Progress
# ==========================================

class CheckInResponse(CamelModel):
    """Result of a successful daily check-in"""
    current_streak: int
    longest_streak: int
    level: int
    total_xp: int
    progress_to_next_level: int = Field(..., ge=0, le=100, description="Percent of the current level completed")
    total_days_completed: int
    xp_awarded: int


class ProgressResponse(CamelModel):
    """Current progress snapshot"""
    current_streak: int
    longest_streak: int
    level: int
    total_xp: int
    progress_to_next_level: int = Field(..., ge=0, le=100)
    total_days_completed: int
    last_checkin_date: Optional[datetime] = Field(
        default=None,
        description="UTC midnight of the last check-in day"
    )
    can_checkin_today: bool


class CheckInHistoryEntry(CamelModel):
    """One past check-in"""
    checkin_date: date
    completed_at: datetime


# ==========================================
# Service
# ==========================================

class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    database: str = Field(..., description="Database connection status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(CamelModel):
    """Error response model"""
    error: str = Field(..., description="User-facing error message")
    type: Optional[str] = Field(None, description="Error kind")
    request_id: Optional[str] = Field(None, description="Correlation ID for support")
