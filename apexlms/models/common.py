# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared API model types."""

from enum import Enum

from pydantic import BaseModel


class QuestionKind(str, Enum):
    """Question kinds supported by the grader."""

    MCQ = "MCQ"
    TF = "TF"


class ContentType(str, Enum):
    """Lesson content types."""

    VIDEO = "VIDEO"
    TEXT = "TEXT"
    QUIZ = "QUIZ"
    SCORM = "SCORM"


class SuccessResponse(BaseModel):
    """Acknowledgement for write operations without a body."""

    success: bool = True


class ErrorResponse(BaseModel):
    """Error body returned by the API.

    Attributes:
        detail: Human-readable error description.
        retryable: Whether the caller may retry the same request.
    """

    detail: str
    retryable: bool = False
