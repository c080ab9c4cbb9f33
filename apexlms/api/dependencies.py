# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get the learning store selected at startup
- Get authenticated users
- Get service instances

Example:
    @router.post("/progress")
    async def mark_lesson_complete(
        data: MarkCompleteRequest,
        current_user: CurrentUser = Depends(require_auth),
        service: ProgressService = Depends(get_progress_service),
    ):
        ...
"""

import logging
from fastapi import Depends, HTTPException, Request, status

from apexlms.api.middleware.auth import CurrentUser, get_current_user
from apexlms.core.config import Settings, get_settings
from apexlms.domains.analytics import AnalyticsService
from apexlms.domains.course import CourseService
from apexlms.domains.grading import GradingService
from apexlms.domains.progress import ProgressService
from apexlms.domains.quiz import QuizService
from apexlms.infrastructure.database import close_database, init_database
from apexlms.infrastructure.database.migrations import run_migrations
from apexlms.infrastructure.database.seeds import seed_demo_content
from apexlms.infrastructure.storage import LearningStore, create_learning_store

logger = logging.getLogger(__name__)

# Learning store singleton, selected once at startup
_learning_store: LearningStore | None = None


async def init_storage(settings: Settings | None = None) -> LearningStore:
    """Initialize the learning store selected by settings.

    For the postgres backend the connection pool is created and pending
    migrations are applied when DB_AUTO_MIGRATE is set. For the memory
    backend the demo content is loaded when STORAGE_SEED_DEMO_DATA is set.

    Args:
        settings: Application settings. Defaults to get_settings().

    Returns:
        The initialized learning store.
    """
    global _learning_store
    settings = settings or get_settings()

    if settings.storage.backend == "postgres":
        await init_database(settings)
        if settings.database.auto_migrate:
            applied = await run_migrations()
            if applied:
                logger.info("Applied migrations: %s", ", ".join(applied))

    store = create_learning_store(settings)

    if settings.storage.backend == "memory" and settings.storage.seed_demo_data:
        await seed_demo_content(store)

    _learning_store = store
    return store


async def close_storage() -> None:
    """Release the learning store and database connections."""
    global _learning_store

    if _learning_store is not None:
        await _learning_store.close()
        _learning_store = None

    await close_database()


def current_learning_store() -> LearningStore | None:
    """Get the learning store, or None before startup or after shutdown."""
    return _learning_store


def get_learning_store() -> LearningStore:
    """Get the learning store initialized at startup.

    Returns:
        LearningStore instance.

    Raises:
        HTTPException: If storage is not initialized.
    """
    if _learning_store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Learning store not initialized",
        )
    return _learning_store


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_author(request: Request) -> CurrentUser:
    """Require a user allowed to author courses and quizzes.

    Raises:
        HTTPException: If not authenticated or not an author.
    """
    user = require_auth(request)
    if not user.can_author:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Instructor or admin access required",
        )
    return user


# =========================================================================
# Service Dependencies
# =========================================================================


def get_grading_service(
    store: LearningStore = Depends(get_learning_store),
) -> GradingService:
    """Get GradingService instance."""
    return GradingService(store)


def get_quiz_service(
    store: LearningStore = Depends(get_learning_store),
) -> QuizService:
    """Get QuizService instance."""
    return QuizService(store)


def get_progress_service(
    store: LearningStore = Depends(get_learning_store),
) -> ProgressService:
    """Get ProgressService instance."""
    return ProgressService(store)


def get_course_service(
    store: LearningStore = Depends(get_learning_store),
) -> CourseService:
    """Get CourseService instance."""
    return CourseService(store)


def get_analytics_service(
    store: LearningStore = Depends(get_learning_store),
) -> AnalyticsService:
    """Get AnalyticsService instance."""
    return AnalyticsService(store)
