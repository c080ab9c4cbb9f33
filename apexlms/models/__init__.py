# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request and response models for the API."""

from apexlms.models.analytics import LearningStatsResponse
from apexlms.models.common import ContentType, ErrorResponse, QuestionKind, SuccessResponse
from apexlms.models.course import (
    CourseContentResponse,
    CourseResponse,
    CreateCourseRequest,
    LessonContentResponse,
    LessonCreate,
    ModuleContentResponse,
    ModuleCreate,
    UpdateCourseRequest,
)
from apexlms.models.progress import (
    CourseProgressResponse,
    LessonStateResponse,
    MarkCompleteRequest,
)
from apexlms.models.quiz import (
    CreateQuizRequest,
    GradeResponse,
    OptionCreate,
    OptionView,
    QuestionCreate,
    QuestionView,
    QuizAttemptResponse,
    QuizResponse,
    SubmissionResponse,
    SubmitQuizRequest,
)

__all__ = [
    # Analytics
    "LearningStatsResponse",
    # Common
    "ContentType",
    "ErrorResponse",
    "QuestionKind",
    "SuccessResponse",
    # Courses
    "CourseContentResponse",
    "CourseResponse",
    "CreateCourseRequest",
    "LessonContentResponse",
    "LessonCreate",
    "ModuleContentResponse",
    "ModuleCreate",
    "UpdateCourseRequest",
    # Progress
    "CourseProgressResponse",
    "LessonStateResponse",
    "MarkCompleteRequest",
    # Quizzes
    "CreateQuizRequest",
    "GradeResponse",
    "OptionCreate",
    "OptionView",
    "QuestionCreate",
    "QuestionView",
    "QuizAttemptResponse",
    "QuizResponse",
    "SubmissionResponse",
    "SubmitQuizRequest",
]
