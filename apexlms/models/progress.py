# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Progress API models."""

from pydantic import BaseModel, Field

from apexlms.domains.gating import LessonState


class MarkCompleteRequest(BaseModel):
    """Request to mark a lesson completed for the caller."""

    course_id: str = Field(..., min_length=1)
    lesson_id: str = Field(..., min_length=1)


class LessonStateResponse(BaseModel):
    """Gate state of one lesson."""

    lesson_id: str
    state: LessonState


class CourseProgressResponse(BaseModel):
    """Learner progress through a course.

    Attributes:
        course_id: Course identifier.
        learner_id: Learner identifier.
        completed_lesson_ids: Completed lessons, sorted.
        total_lessons: Lessons in the course.
        completed_count: Completed lessons that belong to the course outline.
        percent_complete: Rounded completion percentage.
        is_course_completed: Whether every lesson is completed.
        lessons: Gate state of every lesson, in course order.
    """

    course_id: str
    learner_id: str
    completed_lesson_ids: list[str]
    total_lessons: int
    completed_count: int
    percent_complete: int
    is_course_completed: bool
    lessons: list[LessonStateResponse]
