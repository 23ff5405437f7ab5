# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the MoodPulse API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from src.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.routes import health
from src.api.v1 import router as v1_router
from src.core.config import Settings, get_settings
from src.core.intelligence.narrative import NarrativeGenerator, build_narrative_generator
from src.core.wellbeing import WellbeingVocabulary, load_vocabulary
from src.domains.wellbeing import StreakConflictError
from src.infrastructure.database.connection import (
    DatabaseError,
    close_database,
    init_database,
)
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)

SAVE_FAILED_DETAIL = "We could not save your check-in. Please try again."


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Initializes logging and the database on startup and closes the
    database on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    setup_logging(settings)
    logger.info(
        "Starting MoodPulse API: environment=%s, narrative=%s",
        settings.environment,
        type(app.state.narrative_generator).__name__,
    )

    try:
        await init_database(settings)
        logger.info("Database connection initialized")
    except DatabaseError as e:
        logger.error("Failed to initialize database connection: %s", str(e))

    yield

    await close_database()
    logger.info("Shutting down MoodPulse API")


async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Turn store failures and lost streak races into a retryable 503.

    Args:
        request: HTTP request.
        exc: DatabaseError, SQLAlchemyError or StreakConflictError.

    Returns:
        JSON response with a generic message.
    """
    logger.error(
        "Storage failure on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": SAVE_FAILED_DETAIL},
    )


def create_app(
    settings: Settings | None = None,
    narrative_generator: NarrativeGenerator | None = None,
    vocabulary: WellbeingVocabulary | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a new FastAPI instance with all
    middleware, routes, and configurations applied.

    Args:
        settings: Settings to use, defaults to get_settings().
        narrative_generator: Narrative generator, defaults to the one
            built from settings.
        vocabulary: Wellbeing vocabulary, defaults to the one loaded from
            WELLBEING_VOCABULARY_FILE.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="MoodPulse API",
        description="Student emotional wellbeing check-ins and risk analytics",
        version=health.API_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # =========================================================================
    # State
    # =========================================================================
    app.state.settings = settings
    app.state.vocabulary = vocabulary or load_vocabulary(settings.wellbeing.vocabulary_file)
    app.state.narrative_generator = narrative_generator or build_narrative_generator(settings)
    app.state.limiter = limiter

    # =========================================================================
    # Exception handlers
    # =========================================================================
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(StreakConflictError, storage_error_handler)
    app.add_exception_handler(DatabaseError, storage_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================
    app.add_middleware(RequestContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
