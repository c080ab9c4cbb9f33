# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models for the learning database."""

from apexlms.infrastructure.database.models.base import Base, IdMixin, TimestampMixin, generate_id
from apexlms.infrastructure.database.models.course import (
    LESSON_CONTENT_TYPES,
    Course,
    CourseModule,
    Lesson,
)
from apexlms.infrastructure.database.models.progress import (
    PROGRESS_UNIQUE_CONSTRAINT,
    LessonProgress,
)
from apexlms.infrastructure.database.models.quiz import (
    QuestionOption,
    Quiz,
    QuizAttempt,
    QuizQuestion,
    QuizSubmission,
)

__all__ = [
    "Base",
    "IdMixin",
    "TimestampMixin",
    "generate_id",
    # Course structure
    "Course",
    "CourseModule",
    "Lesson",
    "LESSON_CONTENT_TYPES",
    # Quizzes
    "Quiz",
    "QuizQuestion",
    "QuestionOption",
    "QuizAttempt",
    "QuizSubmission",
    # Progress
    "LessonProgress",
    "PROGRESS_UNIQUE_CONSTRAINT",
]
