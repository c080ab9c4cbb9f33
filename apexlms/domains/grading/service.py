# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz grading service.

Grades a learner's answers against the stored correct options and records
the outcome as a submission.

Scoring rules:
- Each question is worth its points when the selected option is the
  correct one, and zero otherwise (including when it is unanswered).
- Answers for questions outside the graded set are ignored.
- score = earned / total * 100, rounded half up to an integer.
- A quiz with no points scores 0 and does not pass.
- passed = score >= passing_score.

Which questions are graded:
- With an attempt: exactly the questions pinned when the attempt started.
- Without an attempt: the whole question bank. Randomized quizzes present
  only a sample, so they must be submitted with an attempt.

Recording the submission is best-effort. If the store rejects the write the
failure is logged and the learner still receives the grade.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from apexlms.domains.errors import (
    AttemptNotFoundError,
    InvalidInputError,
    PersistenceError,
    QuizNotFoundError,
)
from apexlms.infrastructure.events import EventBus, EventTypes, get_event_bus
from apexlms.infrastructure.storage import (
    LearningStore,
    QuestionRecord,
    QuizRecord,
    SubmissionRecord,
    new_id,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GradeResult:
    """Outcome of grading one submission.

    Attributes:
        score: Score 0-100.
        passed: Whether the score met the passing threshold.
        passing_score: Threshold the score was compared against.
        submission_id: Identifier of the recorded submission, or None if it
            could not be recorded.
    """

    score: int
    passed: bool
    passing_score: int
    submission_id: str | None = None


def percent(part: int, whole: int) -> int:
    """Return part/whole as a percentage rounded half up.

    Integer arithmetic keeps the result exact, so 1/8 gives 13 and
    1/200 gives 1. A non-positive whole gives 0.
    """
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (2 * whole)


def tally_points(
    questions: Iterable[QuestionRecord],
    answers: Mapping[str, str],
) -> tuple[int, int]:
    """Sum earned and total points.

    Args:
        questions: Questions being graded, with options.
        answers: Mapping of question id to selected option id.

    Returns:
        Tuple of (earned points, total points).
    """
    earned = 0
    total = 0
    for question in questions:
        total += question.points
        correct_option_id = question.correct_option_id
        if correct_option_id is not None and answers.get(question.id) == correct_option_id:
            earned += question.points
    return earned, total


class GradingService:
    """Service for grading quiz submissions.

    Attributes:
        store: Learning store.
        event_bus: Bus notified when a submission is graded.
    """

    def __init__(
        self,
        store: LearningStore,
        event_bus: EventBus | None = None,
    ) -> None:
        """Initialize grading service.

        Args:
            store: Learning store holding quizzes and submissions.
            event_bus: Event bus. Defaults to the process-wide bus.
        """
        self.store = store
        self.event_bus = event_bus or get_event_bus()

    async def grade(
        self,
        quiz_id: str,
        answers: Mapping[str, str],
        learner_id: str,
        attempt_id: str | None = None,
    ) -> GradeResult:
        """Grade a learner's answers and record the submission.

        Args:
            quiz_id: Quiz being submitted.
            answers: Mapping of question id to selected option id.
            learner_id: Learner submitting.
            attempt_id: Attempt being submitted, if one was started.

        Returns:
            GradeResult with score, pass flag and passing threshold.

        Raises:
            QuizNotFoundError: If the quiz does not exist.
            AttemptNotFoundError: If the attempt does not exist.
            InvalidInputError: If the input is malformed, the attempt belongs
                to another quiz or learner, or a randomized quiz is submitted
                without an attempt.
            PersistenceError: If the quiz cannot be read.
        """
        if not isinstance(answers, Mapping):
            raise InvalidInputError("Answers must map question ids to option ids")
        if not learner_id:
            raise InvalidInputError("Learner id is required")

        quiz = await self.store.get_quiz(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(quiz_id)

        question_ids = await self._graded_question_ids(quiz, learner_id, attempt_id)
        questions = await self.store.get_questions(quiz.id, question_ids)

        earned, total = tally_points(questions, answers)
        score = percent(earned, total)
        passed = total > 0 and score >= quiz.passing_score

        submission = SubmissionRecord(
            id=new_id(),
            learner_id=learner_id,
            quiz_id=quiz.id,
            attempt_id=attempt_id,
            score=score,
            passed=passed,
        )
        submission_id: str | None = submission.id
        try:
            await self.store.save_submission(submission)
        except PersistenceError as e:
            submission_id = None
            logger.error(
                "Failed to record submission: learner=%s, quiz=%s, score=%d: %s",
                learner_id,
                quiz.id,
                score,
                e,
            )

        logger.info(
            "Graded quiz: learner=%s, quiz=%s, earned=%d/%d, score=%d, passed=%s",
            learner_id,
            quiz.id,
            earned,
            total,
            score,
            passed,
        )

        await self.event_bus.publish(
            EventTypes.Quiz.SUBMISSION_GRADED,
            {
                "quiz_id": quiz.id,
                "attempt_id": attempt_id,
                "submission_id": submission_id,
                "score": score,
                "passed": passed,
            },
            learner_id=learner_id,
        )

        return GradeResult(
            score=score,
            passed=passed,
            passing_score=quiz.passing_score,
            submission_id=submission_id,
        )

    async def _graded_question_ids(
        self,
        quiz: QuizRecord,
        learner_id: str,
        attempt_id: str | None,
    ) -> list[str] | None:
        """Resolve the questions a submission is graded against.

        Returns:
            Pinned question ids of the attempt, or None for the whole bank.
        """
        if attempt_id is None:
            if quiz.randomize:
                raise InvalidInputError(
                    "Randomized quiz must be submitted with the attempt_id it was started with"
                )
            return None

        attempt = await self.store.get_attempt(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(attempt_id)
        if attempt.quiz_id != quiz.id:
            raise InvalidInputError(f"Attempt {attempt_id} does not belong to quiz {quiz.id}")
        if attempt.learner_id != learner_id:
            raise InvalidInputError(f"Attempt {attempt_id} does not belong to this learner")
        return attempt.question_ids
