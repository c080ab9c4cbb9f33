# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the Apex LMS API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import apexlms
from apexlms.api.dependencies import close_storage, init_storage
from apexlms.api.middleware.auth import AuthMiddleware
from apexlms.api.routes import health
from apexlms.api.v1 import router as v1_router
from apexlms.api.v1.presence import get_presence_hub
from apexlms.core.config import get_settings
from apexlms.domains.errors import InvalidInputError, NotFoundError, PersistenceError
from apexlms.infrastructure.events import get_event_bus
from apexlms.models.common import ErrorResponse
from apexlms.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events for the application.
    Initializes and cleans up:
    - Logging
    - The learning store (and database pool for postgres)
    - Presence hub subscription to the event bus

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting Apex LMS API",
        extra={
            "environment": settings.environment,
            "storage_backend": settings.storage.backend,
        },
    )

    # =========================================================================
    # Startup
    # =========================================================================

    await init_storage(settings)
    logger.info("Learning store initialized: backend=%s", settings.storage.backend)

    hub = get_presence_hub()
    hub.attach(get_event_bus())

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================

    hub.detach()

    try:
        await close_storage()
        logger.info("Learning store closed")
    except Exception as e:
        logger.warning("Error closing learning store: %s", str(e))

    logger.info("Shutting down Apex LMS API")


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Report a storage failure as retryable."""
    logger.error("Storage failure on %s: %s", request.url.path, exc.message)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=ErrorResponse(detail="Storage temporarily unavailable", retryable=True).model_dump(),
    )


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ErrorResponse(detail=str(exc)).model_dump(),
    )


async def invalid_input_error_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(detail=str(exc)).model_dump(),
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a new FastAPI instance with all
    middleware, routes, and configurations applied.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Apex LMS API",
        description="Courses, gated lesson progression and graded quizzes",
        version=apexlms.__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # Disable automatic redirects from /path to /path/
        # This prevents 307 redirects that lose Authorization headers
        redirect_slashes=False,
    )

    # =========================================================================
    # Exception handlers
    # =========================================================================
    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(InvalidInputError, invalid_input_error_handler)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================

    # CORS middleware (should be last to execute first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # Auth middleware - validates JWT tokens
    app.add_middleware(AuthMiddleware)

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(v1_router)

    return app
