# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Progress API endpoints.

This module provides endpoints for the caller's lesson progress:
- POST / - Mark a lesson completed
- GET /{course_id} - List completed lesson ids
- GET /{course_id}/summary - Completion summary with lesson states
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from apexlms.api.dependencies import get_progress_service, require_auth
from apexlms.api.middleware.auth import CurrentUser
from apexlms.domains.errors import InvalidInputError, NotFoundError
from apexlms.domains.progress import ProgressService
from apexlms.models.common import SuccessResponse
from apexlms.models.progress import CourseProgressResponse, MarkCompleteRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=SuccessResponse,
    summary="Mark lesson complete",
    description="Record that the caller completed a lesson. Repeating the call has no further effect.",
)
async def mark_lesson_complete(
    data: MarkCompleteRequest,
    current_user: CurrentUser = Depends(require_auth),
    service: ProgressService = Depends(get_progress_service),
) -> SuccessResponse:
    """Mark a lesson completed for the caller.

    Raises:
        HTTPException: If the course or lesson is not found.
    """
    try:
        await service.mark_complete(current_user.id, data.course_id, data.lesson_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    return SuccessResponse()


@router.get(
    "/{course_id}",
    response_model=list[str],
    summary="List completed lessons",
)
async def list_completed_lessons(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    service: ProgressService = Depends(get_progress_service),
) -> list[str]:
    """List lesson ids the caller completed in a course."""
    completed = await service.list_completed(current_user.id, course_id)
    return sorted(completed)


@router.get(
    "/{course_id}/summary",
    response_model=CourseProgressResponse,
    summary="Course progress summary",
)
async def get_course_progress(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    service: ProgressService = Depends(get_progress_service),
) -> CourseProgressResponse:
    """Get the caller's progress through a course.

    Raises:
        HTTPException: If course not found.
    """
    try:
        return await service.get_course_progress(current_user.id, course_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
