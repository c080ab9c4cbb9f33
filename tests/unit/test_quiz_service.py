# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the quiz service."""

import random

import pytest

from apexlms.domains.errors import InvalidInputError, QuizNotFoundError
from apexlms.domains.grading import GradingService
from apexlms.domains.quiz import QuizService
from apexlms.infrastructure.events import EventBus, EventTypes
from apexlms.infrastructure.storage import InMemoryLearningStore


def quiz_definition(**overrides) -> dict:
    """Build a valid quiz definition."""
    definition = {
        "title": "Python Basics",
        "passing_score": 60,
        "questions": [
            {
                "text": "Which keyword defines a function?",
                "options": [
                    {"text": "def", "is_correct": True},
                    {"text": "fun"},
                    {"text": "lambda"},
                ],
            },
            {
                "text": "Lists are immutable.",
                "kind": "TF",
                "points": 2,
                "options": [{"text": "True"}, {"text": "False", "is_correct": True}],
            },
        ],
    }
    definition.update(overrides)
    return definition


@pytest.fixture
def quiz_service(memory_store: InMemoryLearningStore, event_bus: EventBus) -> QuizService:
    """Quiz service with a seeded random source."""
    return QuizService(memory_store, event_bus, rng=random.Random(7))


class TestCreateQuiz:
    """Tests for QuizService.create_quiz."""

    @pytest.mark.asyncio
    async def test_creates_quiz_with_bank(
        self,
        quiz_service: QuizService,
        memory_store: InMemoryLearningStore,
    ) -> None:
        quiz = await quiz_service.create_quiz(quiz_definition())

        assert quiz.title == "Python Basics"
        assert quiz.passing_score == 60
        assert quiz.total_questions == 2

        questions = await memory_store.get_questions(quiz.id)
        assert [q.position for q in questions] == [0, 1]
        assert questions[1].kind == "TF"
        assert questions[1].points == 2
        assert questions[0].correct_option_id == questions[0].options[0].id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"passing_score": 101},
            {"passing_score": -1},
            {"question_count": 0},
            {"title": ""},
            {"questions": [{"text": "No answer", "options": [{"text": "a"}, {"text": "b"}]}]},
            {
                "questions": [
                    {
                        "text": "Two answers",
                        "options": [{"text": "a", "is_correct": True}, {"text": "b", "is_correct": True}],
                    }
                ]
            },
            {"questions": [{"text": "Zero", "points": 0, "options": [{"text": "a", "is_correct": True}, {"text": "b"}]}]},
            {
                "questions": [
                    {
                        "text": "TF with three",
                        "kind": "TF",
                        "options": [{"text": "a", "is_correct": True}, {"text": "b"}, {"text": "c"}],
                    }
                ]
            },
        ],
    )
    async def test_rejects_invalid_definitions(self, quiz_service: QuizService, overrides: dict) -> None:
        with pytest.raises(InvalidInputError):
            await quiz_service.create_quiz(quiz_definition(**overrides))

    @pytest.mark.asyncio
    async def test_get_quiz(self, quiz_service: QuizService) -> None:
        created = await quiz_service.create_quiz(quiz_definition())

        fetched = await quiz_service.get_quiz(created.id)

        assert fetched == created

    @pytest.mark.asyncio
    async def test_get_unknown_quiz(self, quiz_service: QuizService) -> None:
        with pytest.raises(QuizNotFoundError):
            await quiz_service.get_quiz("missing")


class TestStartAttempt:
    """Tests for QuizService.start_attempt."""

    @pytest.mark.asyncio
    async def test_full_bank_in_order(self, quiz_service: QuizService, learner_id: str) -> None:
        quiz = await quiz_service.create_quiz(quiz_definition())

        attempt = await quiz_service.start_attempt(quiz.id, learner_id)

        assert [q.text for q in attempt.questions] == [
            "Which keyword defines a function?",
            "Lists are immutable.",
        ]

    @pytest.mark.asyncio
    async def test_learner_view_hides_correct_option(self, quiz_service: QuizService, learner_id: str) -> None:
        quiz = await quiz_service.create_quiz(quiz_definition())

        attempt = await quiz_service.start_attempt(quiz.id, learner_id)

        option = attempt.model_dump()["questions"][0]["options"][0]
        assert set(option) == {"id", "text"}

    @pytest.mark.asyncio
    async def test_randomized_attempt_pins_sample(
        self,
        quiz_service: QuizService,
        memory_store: InMemoryLearningStore,
        learner_id: str,
    ) -> None:
        quiz = await quiz_service.create_quiz(quiz_definition(randomize=True, question_count=1))

        attempt = await quiz_service.start_attempt(quiz.id, learner_id)

        assert len(attempt.questions) == 1
        stored = await memory_store.get_attempt(attempt.attempt_id)
        assert stored is not None
        assert stored.question_ids == [attempt.questions[0].id]
        assert stored.learner_id == learner_id

    @pytest.mark.asyncio
    async def test_sample_capped_at_bank_size(self, quiz_service: QuizService, learner_id: str) -> None:
        quiz = await quiz_service.create_quiz(quiz_definition(randomize=True, question_count=10))

        attempt = await quiz_service.start_attempt(quiz.id, learner_id)

        assert len(attempt.questions) == 2

    @pytest.mark.asyncio
    async def test_grading_uses_pinned_sample(
        self,
        quiz_service: QuizService,
        memory_store: InMemoryLearningStore,
        event_bus: EventBus,
        learner_id: str,
    ) -> None:
        quiz = await quiz_service.create_quiz(quiz_definition(randomize=True, question_count=1))
        attempt = await quiz_service.start_attempt(quiz.id, learner_id)
        pinned = (await memory_store.get_questions(quiz.id, [attempt.questions[0].id]))[0]

        result = await GradingService(memory_store, event_bus).grade(
            quiz.id,
            {pinned.id: pinned.correct_option_id},
            learner_id,
            attempt_id=attempt.attempt_id,
        )

        assert result.score == 100

    @pytest.mark.asyncio
    async def test_publishes_attempt_started(
        self,
        quiz_service: QuizService,
        event_bus: EventBus,
        learner_id: str,
    ) -> None:
        received = []

        async def handler(event) -> None:
            received.append(event)

        event_bus.subscribe(EventTypes.Quiz.ATTEMPT_STARTED, handler)
        quiz = await quiz_service.create_quiz(quiz_definition())

        attempt = await quiz_service.start_attempt(quiz.id, learner_id)

        assert received[0].payload == {"quiz_id": quiz.id, "attempt_id": attempt.attempt_id}

    @pytest.mark.asyncio
    async def test_unknown_quiz(self, quiz_service: QuizService, learner_id: str) -> None:
        with pytest.raises(QuizNotFoundError):
            await quiz_service.start_attempt("missing", learner_id)


class TestListSubmissions:
    """Tests for QuizService.list_submissions."""

    @pytest.mark.asyncio
    async def test_lists_own_submissions(
        self,
        quiz_service: QuizService,
        memory_store: InMemoryLearningStore,
        event_bus: EventBus,
    ) -> None:
        quiz = await quiz_service.create_quiz(quiz_definition())
        grading = GradingService(memory_store, event_bus)
        await grading.grade(quiz.id, {}, "ada")
        await grading.grade(quiz.id, {}, "grace")

        submissions = await quiz_service.list_submissions("ada", quiz.id)

        assert len(submissions) == 1
        assert submissions[0].score == 0

    @pytest.mark.asyncio
    async def test_unknown_quiz(self, quiz_service: QuizService) -> None:
        with pytest.raises(QuizNotFoundError):
            await quiz_service.list_submissions("ada", "missing")
