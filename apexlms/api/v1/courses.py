# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course API endpoints.

This module provides endpoints for courses:
- GET / - List courses
- POST / - Author a course with modules and lessons
- GET /{course_id}/content - Course outline with the caller's lesson states
- PUT /{course_id} - Update course metadata, including publishing
- DELETE /{course_id} - Delete a course
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from apexlms.api.dependencies import get_course_service, require_auth, require_author
from apexlms.api.middleware.auth import CurrentUser
from apexlms.domains.course import CourseService
from apexlms.domains.errors import InvalidInputError, NotFoundError
from apexlms.models.course import (
    CourseContentResponse,
    CourseResponse,
    CreateCourseRequest,
    UpdateCourseRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=list[CourseResponse],
    summary="List courses",
    description="List published courses. Authors may include drafts.",
)
async def list_courses(
    include_unpublished: bool = Query(default=False, description="Include draft courses"),
    current_user: CurrentUser = Depends(require_auth),
    service: CourseService = Depends(get_course_service),
) -> list[CourseResponse]:
    """List courses.

    Raises:
        HTTPException: If a learner asks for draft courses.
    """
    if include_unpublished and not current_user.can_author:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Instructor or admin access required",
        )
    return await service.list_courses(include_unpublished=include_unpublished)


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(
    data: CreateCourseRequest,
    current_user: CurrentUser = Depends(require_author),
    service: CourseService = Depends(get_course_service),
) -> CourseResponse:
    """Create a course with its outline.

    Raises:
        HTTPException: If a lesson references an unknown quiz.
    """
    logger.info("Creating course: title=%s, by=%s", data.title, current_user.id)

    try:
        return await service.create_course(data)
    except InvalidInputError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )


@router.get(
    "/{course_id}/content",
    response_model=CourseContentResponse,
    summary="Get course content",
    description="Modules and lessons in order, each lesson with the caller's state.",
)
async def get_course_content(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    service: CourseService = Depends(get_course_service),
) -> CourseContentResponse:
    """Get course outline for the caller.

    Raises:
        HTTPException: If course not found.
    """
    try:
        return await service.get_course_content(course_id, current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Update course",
    description="Change title, description, thumbnail or published flag.",
)
async def update_course(
    course_id: str,
    data: UpdateCourseRequest,
    current_user: CurrentUser = Depends(require_author),
    service: CourseService = Depends(get_course_service),
) -> CourseResponse:
    """Update course metadata.

    Raises:
        HTTPException: If course not found.
    """
    logger.info("Updating course: id=%s, by=%s", course_id, current_user.id)

    try:
        return await service.update_course(course_id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete course",
)
async def delete_course(
    course_id: str,
    current_user: CurrentUser = Depends(require_author),
    service: CourseService = Depends(get_course_service),
) -> Response:
    """Delete a course with its outline and recorded progress.

    Raises:
        HTTPException: If course not found.
    """
    logger.info("Deleting course: id=%s, by=%s", course_id, current_user.id)

    try:
        await service.delete_course(course_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
