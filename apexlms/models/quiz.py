# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz API models.

Authoring requests are validated here so that every stored question has
positive points and exactly one correct option, and every true/false
question has exactly two options.
"""

from datetime import datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from apexlms.models.common import QuestionKind


class OptionCreate(BaseModel):
    """Answer option in an authoring request."""

    text: str = Field(..., min_length=1, max_length=1000)
    is_correct: bool = False


class QuestionCreate(BaseModel):
    """Question in an authoring request."""

    text: str = Field(..., min_length=1)
    kind: QuestionKind = QuestionKind.MCQ
    points: int = Field(default=1, gt=0, description="Point value of the question")
    options: list[OptionCreate] = Field(..., min_length=2)

    @model_validator(mode="after")
    def validate_options(self) -> Self:
        """Check the correct-option and true/false rules."""
        correct = sum(1 for option in self.options if option.is_correct)
        if correct != 1:
            raise ValueError(
                f"Question must have exactly one correct option, got {correct}"
            )
        if self.kind == QuestionKind.TF and len(self.options) != 2:
            raise ValueError("True/false question must have exactly two options")
        return self


class CreateQuizRequest(BaseModel):
    """Request to author a quiz with its question bank."""

    title: str = Field(..., min_length=1, max_length=255)
    passing_score: int = Field(default=70, ge=0, le=100)
    randomize: bool = False
    question_count: int = Field(
        default=10,
        ge=1,
        description="Questions sampled per attempt when randomize is set",
    )
    questions: list[QuestionCreate] = Field(default_factory=list)


class QuizResponse(BaseModel):
    """Quiz metadata."""

    id: str
    title: str
    passing_score: int
    randomize: bool
    question_count: int
    total_questions: int


class OptionView(BaseModel):
    """Answer option as shown to a learner (no correctness flag)."""

    id: str
    text: str


class QuestionView(BaseModel):
    """Question as shown to a learner."""

    id: str
    text: str
    kind: QuestionKind
    points: int
    options: list[OptionView]


class QuizAttemptResponse(BaseModel):
    """Started attempt with the pinned questions.

    Attributes:
        attempt_id: Identifier to send back with the submission.
        quiz_id: Quiz identifier.
        title: Quiz title.
        passing_score: Score required to pass.
        questions: Questions presented in this attempt, in order.
        started_at: When the attempt was started.
    """

    attempt_id: str
    quiz_id: str
    title: str
    passing_score: int
    questions: list[QuestionView]
    started_at: datetime


class SubmitQuizRequest(BaseModel):
    """Quiz submission.

    Attributes:
        answers: Mapping of question id to selected option id.
        attempt_id: Attempt being submitted. Required for randomized quizzes.
    """

    answers: dict[str, str] = Field(default_factory=dict)
    attempt_id: str | None = None


class GradeResponse(BaseModel):
    """Grading outcome."""

    score: int = Field(..., ge=0, le=100)
    passed: bool
    passing_score: int


class SubmissionResponse(BaseModel):
    """Stored submission."""

    id: str
    quiz_id: str
    attempt_id: str | None = None
    score: int
    passed: bool
    submitted_at: datetime
