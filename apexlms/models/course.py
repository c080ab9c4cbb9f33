# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course API models.

Module and lesson order in a create request is taken from list position.
"""

from typing import Self

from pydantic import BaseModel, Field, model_validator

from apexlms.domains.gating import LessonState
from apexlms.models.common import ContentType


class LessonCreate(BaseModel):
    """Lesson in a course authoring request."""

    title: str = Field(..., min_length=1, max_length=255)
    content_type: ContentType
    content_body: str = ""
    quiz_id: str | None = None

    @model_validator(mode="after")
    def validate_quiz_reference(self) -> Self:
        """Quiz lessons must name the quiz they deliver."""
        if self.content_type == ContentType.QUIZ and not self.quiz_id:
            raise ValueError("Quiz lesson requires quiz_id")
        return self


class ModuleCreate(BaseModel):
    """Module in a course authoring request."""

    title: str = Field(..., min_length=1, max_length=255)
    lessons: list[LessonCreate] = Field(default_factory=list)


class CreateCourseRequest(BaseModel):
    """Request to author a course with its outline."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    thumbnail_url: str | None = None
    is_published: bool = False
    modules: list[ModuleCreate] = Field(default_factory=list)


class UpdateCourseRequest(BaseModel):
    """Partial update of course metadata. Omitted fields keep their value."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    thumbnail_url: str | None = None
    is_published: bool | None = None


class CourseResponse(BaseModel):
    """Course metadata."""

    id: str
    title: str
    description: str
    thumbnail_url: str | None = None
    is_published: bool


class LessonContentResponse(BaseModel):
    """Lesson with the caller's gate state."""

    id: str
    title: str
    content_type: ContentType
    content_body: str
    quiz_id: str | None = None
    order_index: int
    state: LessonState


class ModuleContentResponse(BaseModel):
    """Module with its lessons in order."""

    id: str
    title: str
    order_index: int
    lessons: list[LessonContentResponse]


class CourseContentResponse(BaseModel):
    """Course outline annotated for one learner."""

    course: CourseResponse
    modules: list[ModuleContentResponse]
