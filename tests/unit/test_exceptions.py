"""Unit tests for the exception hierarchy (microhabits/exceptions.py)"""
import logging
import pytest
import psycopg
from datetime import date
from psycopg import errors
from psycopg_pool import PoolTimeout

from microhabits.exceptions import (
    AlreadyCheckedInError,
    AuthenticationError,
    ConnectionError,
    DatabaseError,
    HabitLimitExceededError,
    MicroHabitsError,
    QueryError,
    RecordNotFoundError,
    ValidationError,
    wrap_external_exception,
)


def test_base_error_context():
    error = MicroHabitsError(
        message="Failed to save habit",
        user_id="user-123",
        operation="create_habit",
        context={"habit_name": "Read"}
    )

    assert str(error) == "Failed to save habit"
    assert error.user_message == "An error occurred. Please try again."
    assert error.context == {"habit_name": "Read"}
    assert len(error.request_id) == 36
    assert error.timestamp.tzinfo is not None


def test_request_id_can_be_supplied():
    error = MicroHabitsError(message="x", request_id="req-1")

    assert error.request_id == "req-1"


def test_to_dict():
    error = ValidationError(message="must not be blank", field="name", value="")

    data = error.to_dict()

    assert data["error"] == "ValidationError"
    assert data["message"] == "must not be blank"
    assert data["user_message"] == "Invalid name: must not be blank"
    assert data["request_id"] == error.request_id
    assert "timestamp" in data


def test_already_checked_in_defaults():
    error = AlreadyCheckedInError(checkin_date=date(2024, 3, 10), user_id="user-123")

    assert error.user_message == "Already checked in today"
    assert error.context == {"checkin_date": "2024-03-10"}


def test_habit_limit_message():
    error = HabitLimitExceededError(limit=3)

    assert error.user_message == "Maximum of 3 active habits allowed"


def test_record_not_found_is_database_error():
    error = RecordNotFoundError(message="Habit h1 not found for user", record_type="Habit", record_id="h1")

    assert isinstance(error, DatabaseError)
    assert error.user_message == "Habit not found"
    # Internal message carries the ID, the user-facing one does not
    assert "h1" not in error.user_message


def test_authentication_error_message():
    assert AuthenticationError().user_message == "Authentication required. Please sign in again."


def test_expected_errors_log_below_error(caplog):
    with caplog.at_level(logging.DEBUG, logger="microhabits.exceptions"):
        AlreadyCheckedInError(user_id="user-123")
        QueryError(message="boom")

    levels = {record.getMessage().split(":")[0]: record.levelno for record in caplog.records}
    assert levels["AlreadyCheckedInError"] == logging.INFO
    assert levels["QueryError"] == logging.ERROR


# ============================================================================
# wrap_external_exception
# ============================================================================

def test_wrap_operational_error():
    original = psycopg.OperationalError("could not connect")

    wrapped = wrap_external_exception(original, operation="check_in", user_id="user-123")

    assert isinstance(wrapped, ConnectionError)
    assert wrapped.cause is original
    assert wrapped.operation == "check_in"
    assert wrapped.user_id == "user-123"


def test_wrap_pool_timeout():
    wrapped = wrap_external_exception(PoolTimeout("couldn't get a connection"), operation="list_habits")

    assert isinstance(wrapped, ConnectionError)


def test_wrap_query_error():
    wrapped = wrap_external_exception(errors.UndefinedTable("relation does not exist"), operation="get_progress")

    assert isinstance(wrapped, QueryError)
    assert isinstance(wrapped, DatabaseError)


def test_wrap_query_error_keeps_context():
    wrapped = wrap_external_exception(
        errors.DataError("invalid input"),
        operation="update_habit",
        context={"habit_id": "h1"}
    )

    assert wrapped.context == {"query": None, "habit_id": "h1"}


def test_wrap_unknown_error():
    wrapped = wrap_external_exception(RuntimeError("unexpected"), operation="check_in")

    assert type(wrapped) is MicroHabitsError
    assert "check_in failed" in wrapped.message


@pytest.mark.parametrize("error_class", [
    ValidationError,
    AlreadyCheckedInError,
    HabitLimitExceededError,
    DatabaseError,
    AuthenticationError,
])
def test_hierarchy(error_class):
    assert issubclass(error_class, MicroHabitsError)
