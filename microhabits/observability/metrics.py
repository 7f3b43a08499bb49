"""
Prometheus metrics definitions for microhabits.

- HTTP/API metrics: Request counts, latency, in-flight requests
- Check-in metrics: Successful check-ins, rejected duplicates, XP awarded
- Habit metrics: Habits created

Metrics are exposed at the /metrics endpoint for Prometheus scraping.
"""

import logging
import os
import sys
from prometheus_client import Counter, Gauge, Histogram, Info

logger = logging.getLogger(__name__)

# =============================================================================
# HTTP/API Metrics
# =============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests received",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"],
)

# =============================================================================
# Check-in Metrics
# =============================================================================

checkins_total = Counter(
    "checkins_total",
    "Total successful daily check-ins",
)

checkin_conflicts_total = Counter(
    "checkin_conflicts_total",
    "Check-ins rejected because the user already checked in that day",
    ["source"],  # precheck: found by lookup, constraint: lost the unique-insert race
)

xp_awarded_total = Counter(
    "xp_awarded_total",
    "Total XP awarded",
    ["activity_type"],
)

# =============================================================================
# Habit Metrics
# =============================================================================

habits_created_total = Counter(
    "habits_created_total",
    "Total habits created",
)

# =============================================================================
# Application Info
# =============================================================================

app_info = Info(
    "app_info",
    "Application information",
)


def init_metrics():
    """
    Initialize metrics with application information.

    Called once at application startup.
    """
    from microhabits.config import SENTRY_ENVIRONMENT

    app_info.info(
        {
            "version": os.getenv("GIT_COMMIT_SHA", "dev")[:7],
            "environment": SENTRY_ENVIRONMENT,
            "python_version": f"{sys.version_info.major}.{sys.version_info.minor}",
        }
    )

    logger.info("Prometheus metrics initialized")
