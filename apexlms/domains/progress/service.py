# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Progress service for the lesson completion ledger.

This module provides the ProgressService class for:
- Recording that a learner completed a lesson
- Listing completed lessons of a course
- Summarizing course progress with lesson gate states

Completion is idempotent and lock-free: the store inserts with
insert-or-ignore semantics on (learner, course, lesson), so repeated or
concurrent completions leave exactly one record. Records are never deleted,
so the completed set of a learner only grows.

Completion does not consult the lesson gate. Clients show locked lessons as
unavailable; the ledger records whatever the learner finished.
"""

import logging

from apexlms.domains.errors import (
    CourseNotFoundError,
    InvalidInputError,
    LessonNotFoundError,
)
from apexlms.domains.gating import build_sequence, lesson_states
from apexlms.domains.grading.service import percent
from apexlms.infrastructure.events import EventBus, EventTypes, get_event_bus
from apexlms.infrastructure.storage import LearningStore
from apexlms.models.progress import CourseProgressResponse, LessonStateResponse

logger = logging.getLogger(__name__)


class ProgressService:
    """Service for recording and reading lesson progress.

    Attributes:
        store: Learning store.
        event_bus: Bus notified when a lesson is completed for the first time.
    """

    def __init__(
        self,
        store: LearningStore,
        event_bus: EventBus | None = None,
    ) -> None:
        """Initialize progress service.

        Args:
            store: Learning store.
            event_bus: Event bus. Defaults to the process-wide bus.
        """
        self.store = store
        self.event_bus = event_bus or get_event_bus()

    async def mark_complete(self, learner_id: str, course_id: str, lesson_id: str) -> None:
        """Record that a learner completed a lesson.

        Calling this more than once has the same effect as calling it once.

        Args:
            learner_id: Learner identifier.
            course_id: Course identifier.
            lesson_id: Lesson identifier; must belong to the course.

        Raises:
            InvalidInputError: If an identifier is empty.
            CourseNotFoundError: If the course does not exist.
            LessonNotFoundError: If the lesson is not part of the course.
            PersistenceError: If the record cannot be written.
        """
        if not learner_id or not course_id or not lesson_id:
            raise InvalidInputError("learner_id, course_id and lesson_id are required")

        await self._course_sequence(course_id, lesson_id)

        created = await self.store.add_progress(learner_id, course_id, lesson_id)
        if not created:
            logger.debug(
                "Lesson already completed: learner=%s, course=%s, lesson=%s",
                learner_id,
                course_id,
                lesson_id,
            )
            return

        logger.info(
            "Lesson completed: learner=%s, course=%s, lesson=%s",
            learner_id,
            course_id,
            lesson_id,
        )

        await self.event_bus.publish(
            EventTypes.Progress.LESSON_COMPLETED,
            {"course_id": course_id, "lesson_id": lesson_id},
            learner_id=learner_id,
        )

    async def list_completed(self, learner_id: str, course_id: str) -> set[str]:
        """Get the lessons a learner completed in a course.

        Raises:
            PersistenceError: If the store cannot be read.
        """
        return await self.store.list_progress(learner_id, course_id)

    async def get_course_progress(self, learner_id: str, course_id: str) -> CourseProgressResponse:
        """Summarize a learner's progress through a course.

        Args:
            learner_id: Learner identifier.
            course_id: Course identifier.

        Returns:
            Completion counts, percentage and gate state per lesson.

        Raises:
            CourseNotFoundError: If the course does not exist.
            PersistenceError: If the store cannot be read.
        """
        sequence = await self._course_sequence(course_id)
        completed = await self.store.list_progress(learner_id, course_id)

        total = len(sequence)
        completed_count = sum(1 for lesson_id in sequence if lesson_id in completed)

        return CourseProgressResponse(
            course_id=course_id,
            learner_id=learner_id,
            completed_lesson_ids=sorted(completed),
            total_lessons=total,
            completed_count=completed_count,
            percent_complete=percent(completed_count, total),
            is_course_completed=total > 0 and completed_count == total,
            lessons=[
                LessonStateResponse(lesson_id=lesson_id, state=state)
                for lesson_id, state in lesson_states(sequence, completed)
            ],
        )

    async def _course_sequence(self, course_id: str, lesson_id: str | None = None) -> list[str]:
        """Load the lesson sequence of a course and check membership.

        Raises:
            CourseNotFoundError: If the course does not exist.
            LessonNotFoundError: If lesson_id is given and not in the course.
        """
        course = await self.store.get_course(course_id)
        if course is None:
            raise CourseNotFoundError(course_id)

        sequence = build_sequence(await self.store.get_course_outline(course_id))
        if lesson_id is not None and lesson_id not in sequence:
            raise LessonNotFoundError(
                lesson_id,
                f"Lesson not found in course {course_id}: {lesson_id}",
            )
        return sequence
