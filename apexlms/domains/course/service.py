# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course service for the course read model.

This module provides the CourseService class for:
- Listing courses (published only, unless requested otherwise)
- Reading a course outline annotated with a learner's lesson states
- Authoring a course with its modules and lessons
- Updating course metadata (including publishing) and deleting courses
"""

import logging

from apexlms.domains.errors import CourseNotFoundError, InvalidInputError
from apexlms.domains.gating import build_sequence, lesson_state
from apexlms.infrastructure.storage import (
    CourseRecord,
    LearningStore,
    LessonRecord,
    ModuleRecord,
    new_id,
)
from apexlms.models.course import (
    CourseContentResponse,
    CourseResponse,
    CreateCourseRequest,
    LessonContentResponse,
    ModuleContentResponse,
    UpdateCourseRequest,
)

logger = logging.getLogger(__name__)


class CourseService:
    """Service for reading and authoring courses.

    Attributes:
        store: Learning store.
    """

    def __init__(self, store: LearningStore) -> None:
        """Initialize course service.

        Args:
            store: Learning store.
        """
        self.store = store

    async def list_courses(self, include_unpublished: bool = False) -> list[CourseResponse]:
        """List courses ordered by title.

        Args:
            include_unpublished: Also return draft courses.

        Returns:
            Course summaries.
        """
        courses = await self.store.list_courses(published_only=not include_unpublished)
        return [self._to_response(course) for course in courses]

    async def get_course_content(self, course_id: str, learner_id: str) -> CourseContentResponse:
        """Get a course outline with the learner's state for each lesson.

        Args:
            course_id: Course identifier.
            learner_id: Learner whose progress drives the lesson states.

        Returns:
            Course with ordered modules and lessons.

        Raises:
            CourseNotFoundError: If the course does not exist.
            PersistenceError: If the store cannot be read.
        """
        course = await self.store.get_course(course_id)
        if course is None:
            raise CourseNotFoundError(course_id)

        modules = await self.store.get_course_outline(course_id)
        completed = await self.store.list_progress(learner_id, course_id)
        sequence = build_sequence(modules)

        return CourseContentResponse(
            course=self._to_response(course),
            modules=[
                ModuleContentResponse(
                    id=module.id,
                    title=module.title,
                    order_index=module.order_index,
                    lessons=[
                        LessonContentResponse(
                            id=lesson.id,
                            title=lesson.title,
                            content_type=lesson.content_type,
                            content_body=lesson.content_body,
                            quiz_id=lesson.quiz_id,
                            order_index=lesson.order_index,
                            state=lesson_state(lesson.id, sequence, completed),
                        )
                        for lesson in module.lessons
                    ],
                )
                for module in modules
            ],
        )

    async def create_course(self, request: CreateCourseRequest) -> CourseResponse:
        """Create a course with its outline.

        Module and lesson order follow list position.

        Args:
            request: Course definition.

        Returns:
            The created course.

        Raises:
            InvalidInputError: If a quiz lesson references an unknown quiz.
            PersistenceError: If the course cannot be stored.
        """
        quiz_ids = {
            lesson.quiz_id
            for module in request.modules
            for lesson in module.lessons
            if lesson.quiz_id
        }
        for quiz_id in sorted(quiz_ids):
            if await self.store.get_quiz(quiz_id) is None:
                raise InvalidInputError(f"Lesson references unknown quiz: {quiz_id}")

        course = CourseRecord(
            id=new_id(),
            title=request.title,
            description=request.description,
            thumbnail_url=request.thumbnail_url,
            is_published=request.is_published,
        )

        modules = []
        for module_index, module in enumerate(request.modules):
            module_id = new_id()
            modules.append(
                ModuleRecord(
                    id=module_id,
                    course_id=course.id,
                    title=module.title,
                    order_index=module_index,
                    lessons=[
                        LessonRecord(
                            id=new_id(),
                            module_id=module_id,
                            title=lesson.title,
                            content_type=lesson.content_type.value,
                            content_body=lesson.content_body,
                            quiz_id=lesson.quiz_id,
                            order_index=lesson_index,
                        )
                        for lesson_index, lesson in enumerate(module.lessons)
                    ],
                )
            )

        await self.store.save_course(course, modules)

        logger.info(
            "Created course: id=%s, modules=%d, published=%s",
            course.id,
            len(modules),
            course.is_published,
        )

        return self._to_response(course)

    async def update_course(self, course_id: str, request: UpdateCourseRequest) -> CourseResponse:
        """Update course metadata.

        Fields omitted from the request keep their current value. The
        outline is not touched.

        Args:
            course_id: Course identifier.
            request: Fields to change.

        Returns:
            The updated course.

        Raises:
            CourseNotFoundError: If the course does not exist.
            PersistenceError: If the course cannot be stored.
        """
        course = await self.store.get_course(course_id)
        if course is None:
            raise CourseNotFoundError(course_id)

        # Only thumbnail_url may be cleared with an explicit null.
        changes = {
            name: value
            for name, value in request.model_dump(exclude_unset=True).items()
            if value is not None or name == "thumbnail_url"
        }
        for name, value in changes.items():
            setattr(course, name, value)

        if not await self.store.update_course(course):
            raise CourseNotFoundError(course_id)

        logger.info(
            "Updated course: id=%s, fields=%s, published=%s",
            course_id,
            ",".join(sorted(changes)),
            course.is_published,
        )
        return self._to_response(course)

    async def delete_course(self, course_id: str) -> None:
        """Delete a course with its outline and the progress recorded in it.

        Raises:
            CourseNotFoundError: If the course does not exist.
            PersistenceError: If the course cannot be deleted.
        """
        if not await self.store.delete_course(course_id):
            raise CourseNotFoundError(course_id)
        logger.info("Deleted course: id=%s", course_id)

    @staticmethod
    def _to_response(course: CourseRecord) -> CourseResponse:
        return CourseResponse(
            id=course.id,
            title=course.title,
            description=course.description,
            thumbnail_url=course.thumbnail_url,
            is_published=course.is_published,
        )
