"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
import psycopg
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from microhabits.api.routes import router
from microhabits.api.metrics_routes import router as metrics_router
from microhabits.api.middleware import setup_cors, setup_rate_limiting
from microhabits.config import AUTO_MIGRATE, ENABLE_METRICS, LOG_LEVEL, MIGRATIONS_PATH
from microhabits.db.connection import db
from microhabits.exceptions import (
    AlreadyCheckedInError,
    AuthenticationError,
    DatabaseError,
    HabitLimitExceededError,
    MicroHabitsError,
    RecordNotFoundError,
    ValidationError,
    wrap_external_exception,
)
from microhabits.observability.metrics import init_metrics
from microhabits.observability.metrics_middleware import setup_metrics_middleware
from microhabits.observability.sentry_config import init_sentry, shutdown_sentry
from microhabits.services.container import init_container

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL)
)

logger = logging.getLogger(__name__)

# Resolved by walking the exception's MRO, so subclasses map before their bases
ERROR_STATUS_CODES = {
    AlreadyCheckedInError: 400,
    HabitLimitExceededError: 400,
    AuthenticationError: 401,
    RecordNotFoundError: 404,
    ValidationError: 422,
    DatabaseError: 503,
    MicroHabitsError: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application"""
    # Startup
    logger.info("Starting API server...")
    await db.init_pool()
    logger.info("Database pool initialized")

    if AUTO_MIGRATE:
        applied = await db.apply_migrations(MIGRATIONS_PATH)
        logger.info(f"Applied {len(applied)} migration file(s)")

    init_container(db)
    if ENABLE_METRICS:
        init_metrics()

    yield

    # Shutdown
    logger.info("Shutting down API server...")
    await db.close_pool()
    logger.info("Database pool closed")
    shutdown_sentry()


def error_response(exc: MicroHabitsError, status_code: int) -> JSONResponse:
    """Client-safe error body; internal messages and record IDs stay in the logs"""
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.user_message,
            "type": exc.__class__.__name__,
            "requestId": exc.request_id,
        },
        headers=headers,
    )


def create_api_application() -> FastAPI:
    """Create and configure FastAPI application"""
    init_sentry()

    app = FastAPI(
        title="Micro-Habits API",
        description="Daily check-ins, streaks and XP for up to three micro-habits",
        version="1.0.0",
        lifespan=lifespan
    )

    # Setup middleware
    setup_cors(app)
    setup_rate_limiting(app)
    setup_metrics_middleware(app)

    # Include routes
    app.include_router(router)
    if ENABLE_METRICS:
        app.include_router(metrics_router)

    @app.exception_handler(MicroHabitsError)
    async def domain_exception_handler(request: Request, exc: MicroHabitsError):
        for exc_class in type(exc).__mro__:
            if exc_class in ERROR_STATUS_CODES:
                return error_response(exc, ERROR_STATUS_CODES[exc_class])
        return error_response(exc, 500)

    @app.exception_handler(psycopg.Error)
    async def database_exception_handler(request: Request, exc: psycopg.Error):
        wrapped = wrap_external_exception(exc, operation=f"{request.method} {request.url.path}")
        return error_response(wrapped, 503)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"}
        )

    logger.info("FastAPI application created")

    return app


app = create_api_application()
