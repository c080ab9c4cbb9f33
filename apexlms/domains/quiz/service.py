# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz service for authoring quizzes and starting attempts.

This module provides the QuizService class for:
- Quiz authoring with question bank validation
- Starting attempts, which pins the presented questions
- Listing a learner's submission history
"""

import logging
import random
from typing import Any

from pydantic import ValidationError

from apexlms.domains.errors import InvalidInputError, QuizNotFoundError
from apexlms.infrastructure.events import EventBus, EventTypes, get_event_bus
from apexlms.infrastructure.storage import (
    AttemptRecord,
    LearningStore,
    OptionRecord,
    QuestionRecord,
    QuizRecord,
    new_id,
)
from apexlms.models.quiz import (
    CreateQuizRequest,
    OptionView,
    QuestionView,
    QuizAttemptResponse,
    QuizResponse,
    SubmissionResponse,
)

logger = logging.getLogger(__name__)


class QuizService:
    """Service for quiz authoring and attempts.

    Attributes:
        store: Learning store.
        event_bus: Bus notified when an attempt starts.
        rng: Random source used to sample questions.
    """

    def __init__(
        self,
        store: LearningStore,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize quiz service.

        Args:
            store: Learning store.
            event_bus: Event bus. Defaults to the process-wide bus.
            rng: Random source for sampling. Defaults to a fresh Random.
        """
        self.store = store
        self.event_bus = event_bus or get_event_bus()
        self.rng = rng or random.Random()

    async def create_quiz(self, request: CreateQuizRequest | dict[str, Any]) -> QuizResponse:
        """Create a quiz with its question bank.

        Question order is taken from list position.

        Args:
            request: Quiz definition.

        Returns:
            The created quiz.

        Raises:
            InvalidInputError: If the definition violates the authoring rules.
            PersistenceError: If the quiz cannot be stored.
        """
        if not isinstance(request, CreateQuizRequest):
            try:
                request = CreateQuizRequest.model_validate(request)
            except ValidationError as e:
                raise InvalidInputError(f"Invalid quiz definition: {e}") from e

        quiz = QuizRecord(
            id=new_id(),
            title=request.title,
            passing_score=request.passing_score,
            randomize=request.randomize,
            question_count=request.question_count,
        )

        questions = []
        for position, item in enumerate(request.questions):
            question_id = new_id()
            questions.append(
                QuestionRecord(
                    id=question_id,
                    quiz_id=quiz.id,
                    text=item.text,
                    kind=item.kind.value,
                    points=item.points,
                    position=position,
                    options=[
                        OptionRecord(
                            id=new_id(),
                            question_id=question_id,
                            text=option.text,
                            is_correct=option.is_correct,
                        )
                        for option in item.options
                    ],
                )
            )

        await self.store.save_quiz(quiz, questions)

        logger.info(
            "Created quiz: id=%s, questions=%d, randomize=%s",
            quiz.id,
            len(questions),
            quiz.randomize,
        )

        return self._to_response(quiz, len(questions))

    async def get_quiz(self, quiz_id: str) -> QuizResponse:
        """Get quiz metadata.

        Raises:
            QuizNotFoundError: If the quiz does not exist.
        """
        quiz = await self._require_quiz(quiz_id)
        questions = await self.store.get_questions(quiz.id)
        return self._to_response(quiz, len(questions))

    async def start_attempt(self, quiz_id: str, learner_id: str) -> QuizAttemptResponse:
        """Start an attempt and pin the questions presented.

        Randomized quizzes present a sample of question_count questions
        (or the whole bank when it is smaller). Other quizzes present the
        whole bank in authoring order.

        Args:
            quiz_id: Quiz to attempt.
            learner_id: Learner starting the attempt.

        Returns:
            Attempt with the questions as the learner sees them.

        Raises:
            QuizNotFoundError: If the quiz does not exist.
            PersistenceError: If the attempt cannot be stored.
        """
        quiz = await self._require_quiz(quiz_id)
        bank = await self.store.get_questions(quiz.id)

        if quiz.randomize:
            presented = self.rng.sample(bank, min(quiz.question_count, len(bank)))
        else:
            presented = bank

        attempt = AttemptRecord(
            id=new_id(),
            quiz_id=quiz.id,
            learner_id=learner_id,
            question_ids=[question.id for question in presented],
        )
        await self.store.save_attempt(attempt)

        logger.info(
            "Started quiz attempt: attempt=%s, learner=%s, quiz=%s, questions=%d/%d",
            attempt.id,
            learner_id,
            quiz.id,
            len(presented),
            len(bank),
        )

        await self.event_bus.publish(
            EventTypes.Quiz.ATTEMPT_STARTED,
            {"quiz_id": quiz.id, "attempt_id": attempt.id},
            learner_id=learner_id,
        )

        return QuizAttemptResponse(
            attempt_id=attempt.id,
            quiz_id=quiz.id,
            title=quiz.title,
            passing_score=quiz.passing_score,
            started_at=attempt.started_at,
            questions=[
                QuestionView(
                    id=question.id,
                    text=question.text,
                    kind=question.kind,
                    points=question.points,
                    options=[OptionView(id=o.id, text=o.text) for o in question.options],
                )
                for question in presented
            ],
        )

    async def list_submissions(self, learner_id: str, quiz_id: str) -> list[SubmissionResponse]:
        """List a learner's graded submissions for a quiz, oldest first.

        Raises:
            QuizNotFoundError: If the quiz does not exist.
        """
        quiz = await self._require_quiz(quiz_id)
        submissions = await self.store.list_submissions(learner_id, quiz.id)
        return [
            SubmissionResponse(
                id=s.id,
                quiz_id=s.quiz_id,
                attempt_id=s.attempt_id,
                score=s.score,
                passed=s.passed,
                submitted_at=s.submitted_at,
            )
            for s in submissions
        ]

    async def _require_quiz(self, quiz_id: str) -> QuizRecord:
        quiz = await self.store.get_quiz(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(quiz_id)
        return quiz

    @staticmethod
    def _to_response(quiz: QuizRecord, total_questions: int) -> QuizResponse:
        return QuizResponse(
            id=quiz.id,
            title=quiz.title,
            passing_score=quiz.passing_score,
            randomize=quiz.randomize,
            question_count=quiz.question_count,
            total_questions=total_questions,
        )
