"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from taskhive import __version__
from taskhive.api.middleware import (
    AuthenticationMiddleware,
    ErrorHandlingMiddleware,
    RequestContextMiddleware,
    RequestLoggingMiddleware,
)
from taskhive.api.middleware.errors import request_validation_handler
from taskhive.api.routers import api_router, health_router
from taskhive.config.settings import Settings, get_settings
from taskhive.config.validation import validate_or_raise
from taskhive.core.logging import setup_logging
from taskhive.db.config import close_db, init_db

logger = structlog.get_logger("taskhive.api")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)

    Returns:
        Configured FastAPI application

    Example:
        # Run with uvicorn
        uvicorn taskhive.api.app:create_app --factory
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="TaskHive API",
        description="Multi-tenant project and task management API",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=_lifespan,
    )

    # Store settings on app state for access in dependencies and middleware
    app.state.settings = settings

    _configure_middleware(app, settings)
    _configure_routers(app)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Validate configuration, configure logging and open the database pool."""
    settings: Settings = app.state.settings

    setup_logging()
    validate_or_raise(settings)
    logger.info("app_starting", environment=settings.ENVIRONMENT)

    await init_db(create_schema=settings.is_sqlite)
    logger.info("database_ready")

    yield

    logger.info("app_stopping")
    await close_db()


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Middleware order (outermost to innermost execution):
    1. RequestLoggingMiddleware - Assigns request ID, logs all requests
    2. ErrorHandlingMiddleware - Converts exceptions to HTTP responses
    3. CORSMiddleware - Handles CORS (if configured)
    4. AuthenticationMiddleware - Validates Bearer token
    5. RequestContextMiddleware - Sets ContextVar for the identity

    Middleware is added in reverse order because Starlette processes them
    from last-added to first-added.
    """
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(AuthenticationMiddleware)

    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)


def _configure_routers(app: FastAPI) -> None:
    app.include_router(health_router)
    app.include_router(api_router)
