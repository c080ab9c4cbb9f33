# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    courses: Course listing, authoring and content endpoints.
    progress: Lesson completion endpoints.
    quizzes: Quiz authoring, attempt and submission endpoints.
    presence: Presence and progress WebSocket.
    admin: Dashboard stats for instructors and administrators.
"""

from fastapi import APIRouter

from apexlms.api.v1 import admin, courses, presence, progress, quizzes

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(courses.router, prefix="/courses", tags=["Courses"])
router.include_router(progress.router, prefix="/progress", tags=["Progress"])
router.include_router(quizzes.router, prefix="/quizzes", tags=["Quizzes"])
router.include_router(presence.router, prefix="/presence", tags=["Presence"])
router.include_router(admin.router, prefix="/admin", tags=["Admin"])

__all__ = ["router"]
