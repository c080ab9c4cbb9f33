# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event type constants for learning events.

Publishers and subscribers refer to these constants instead of string
literals so event names have a single definition.
"""


class EventTypes:
    """All event types, grouped by domain."""

    class Quiz:
        """Quiz events."""

        ATTEMPT_STARTED = "quiz.attempt.started"
        SUBMISSION_GRADED = "quiz.submission.graded"

    class Progress:
        """Lesson progress events."""

        LESSON_COMPLETED = "progress.lesson.completed"


class EventPatterns:
    """Wildcard patterns for subscribing to whole domains."""

    ALL_QUIZ = "quiz.*"
    ALL_PROGRESS = "progress.*"
