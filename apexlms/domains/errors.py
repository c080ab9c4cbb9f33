# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error types shared by the learning services.

Three failure families are distinguished:
- NotFoundError: a referenced quiz, course, lesson or attempt does not exist
- InvalidInputError: malformed caller input or invalid authoring data
- PersistenceError: the learning store is unavailable or rejected a write

NotFoundError and InvalidInputError describe caller or data errors and are
never retried. PersistenceError is transient from the caller's point of view.
"""


class LearningServiceError(Exception):
    """Base exception for learning service errors."""

    pass


class NotFoundError(LearningServiceError):
    """Raised when a referenced entity does not exist."""

    entity = "Resource"

    def __init__(self, entity_id: str, message: str | None = None) -> None:
        """Initialize the error.

        Args:
            entity_id: Identifier that could not be resolved.
            message: Optional override for the error message.
        """
        super().__init__(message or f"{self.entity} not found: {entity_id}")
        self.entity_id = entity_id


class QuizNotFoundError(NotFoundError):
    """Raised when a quiz is not found."""

    entity = "Quiz"


class CourseNotFoundError(NotFoundError):
    """Raised when a course is not found."""

    entity = "Course"


class LessonNotFoundError(NotFoundError):
    """Raised when a lesson is not found in a course."""

    entity = "Lesson"


class AttemptNotFoundError(NotFoundError):
    """Raised when a quiz attempt is not found."""

    entity = "Quiz attempt"


class InvalidInputError(LearningServiceError):
    """Raised when caller input or authoring data is invalid."""

    pass


class PersistenceError(LearningServiceError):
    """Raised when the learning store fails.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying storage error.
    """

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """Initialize the persistence error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message
