"""Sentry configuration and initialization for error tracking."""

import logging
import os
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from microhabits.exceptions import (
    AlreadyCheckedInError,
    AuthenticationError,
    HabitLimitExceededError,
    RecordNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# User-facing outcomes, not faults
EXPECTED_ERRORS = (
    AlreadyCheckedInError,
    HabitLimitExceededError,
    RecordNotFoundError,
    AuthenticationError,
    ValidationError,
)


def init_sentry() -> bool:
    """
    Initialize Sentry SDK for error tracking.

    Environment variables:
        ENABLE_SENTRY: Feature flag to enable/disable Sentry
        SENTRY_DSN: Sentry project DSN
        SENTRY_ENVIRONMENT: Environment name (development, staging, production)
        SENTRY_TRACES_SAMPLE_RATE: Fraction of transactions to sample (0.0-1.0)
        GIT_COMMIT_SHA: Git commit SHA for release tracking (optional)

    Returns:
        True if Sentry was initialized
    """
    from microhabits.config import (
        ENABLE_SENTRY,
        SENTRY_DSN,
        SENTRY_ENVIRONMENT,
        SENTRY_TRACES_SAMPLE_RATE,
    )

    if not ENABLE_SENTRY:
        logger.info("Sentry is disabled (ENABLE_SENTRY=false)")
        return False

    if not SENTRY_DSN:
        logger.warning("Sentry DSN not configured - error tracking disabled")
        return False

    release = os.getenv("GIT_COMMIT_SHA")
    release = f"microhabits@{release[:7]}" if release else "microhabits@dev"

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=SENTRY_ENVIRONMENT,
        release=release,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        attach_stacktrace=True,
        # Session tokens travel in headers
        send_default_pii=False,
        before_send=_before_send,
    )

    logger.info(
        f"Sentry initialized: environment={SENTRY_ENVIRONMENT}, "
        f"release={release}, traces_sample_rate={SENTRY_TRACES_SAMPLE_RATE}"
    )
    return True


def _before_send(event, hint):
    """Drop 4xx HTTP exceptions and expected domain errors."""
    if "exc_info" in hint:
        exc_type, exc_value, _ = hint["exc_info"]
        if isinstance(exc_value, EXPECTED_ERRORS):
            return None
        if exc_type.__name__ == "HTTPException" and getattr(exc_value, "status_code", 500) < 500:
            return None

    return event


def shutdown_sentry() -> None:
    """Flush pending Sentry events before shutdown."""
    if sentry_sdk.is_initialized():
        logger.info("Flushing Sentry events before shutdown...")
        sentry_sdk.flush(timeout=2.0)
