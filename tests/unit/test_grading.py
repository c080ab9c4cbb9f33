# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the grading service."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from apexlms.domains.errors import (
    AttemptNotFoundError,
    InvalidInputError,
    PersistenceError,
    QuizNotFoundError,
)
from apexlms.domains.grading import GradeResult, GradingService, percent, tally_points
from apexlms.infrastructure.events import EventBus, EventTypes
from apexlms.infrastructure.storage import (
    AttemptRecord,
    InMemoryLearningStore,
    QuizRecord,
)


class TestPercent:
    """Tests for half-up percentage rounding."""

    @pytest.mark.parametrize(
        ("part", "whole", "expected"),
        [
            (1, 2, 50),
            (2, 2, 100),
            (0, 5, 0),
            (1, 8, 13),
            (1, 3, 33),
            (2, 3, 67),
            (1, 200, 1),
            (0, 0, 0),
            (3, 0, 0),
        ],
    )
    def test_percent(self, part: int, whole: int, expected: int) -> None:
        assert percent(part, whole) == expected


class TestTallyPoints:
    """Tests for point summation."""

    def test_weights_by_points(self, question_factory) -> None:
        questions = [
            question_factory("z", "q1", "a", ["x"], points=3),
            question_factory("z", "q2", "b", ["x"], points=1),
        ]

        assert tally_points(questions, {"q1": "a", "q2": "x"}) == (3, 4)

    def test_unanswered_and_unknown_answers(self, question_factory) -> None:
        questions = [question_factory("z", "q1", "a", ["x"])]

        assert tally_points(questions, {"other": "a"}) == (0, 1)


@pytest.fixture
def grading_service(quiz_store: InMemoryLearningStore, event_bus: EventBus) -> GradingService:
    """Grading service over the basic quiz."""
    return GradingService(quiz_store, event_bus)


class TestGradingService:
    """Tests for GradingService.grade."""

    @pytest.mark.asyncio
    async def test_half_correct_fails(self, grading_service: GradingService, learner_id: str) -> None:
        result = await grading_service.grade("quiz-basic", {"q1": "optA", "q2": "optX"}, learner_id)

        assert result.score == 50
        assert result.passed is False
        assert result.passing_score == 70

    @pytest.mark.asyncio
    async def test_all_correct_passes(self, grading_service: GradingService, learner_id: str) -> None:
        result = await grading_service.grade("quiz-basic", {"q1": "optA", "q2": "optB"}, learner_id)

        assert result.score == 100
        assert result.passed is True

    @pytest.mark.asyncio
    async def test_grading_is_deterministic(self, grading_service: GradingService, learner_id: str) -> None:
        answers = {"q1": "optA", "q2": "optX"}

        first = await grading_service.grade("quiz-basic", answers, learner_id)
        second = await grading_service.grade("quiz-basic", answers, learner_id)

        assert (first.score, first.passed) == (second.score, second.passed)

    @pytest.mark.asyncio
    async def test_score_at_threshold_passes(
        self,
        memory_store: InMemoryLearningStore,
        question_factory,
        learner_id: str,
    ) -> None:
        await memory_store.save_quiz(
            QuizRecord(id="half", title="Half", passing_score=50),
            [
                question_factory("half", "h1", "a", ["x"], position=0),
                question_factory("half", "h2", "b", ["x"], position=1),
            ],
        )
        service = GradingService(memory_store, EventBus())

        result = await service.grade("half", {"h1": "a"}, learner_id)

        assert result.score == 50
        assert result.passed is True

    @pytest.mark.asyncio
    async def test_quiz_without_points_scores_zero(
        self,
        memory_store: InMemoryLearningStore,
        learner_id: str,
    ) -> None:
        await memory_store.save_quiz(QuizRecord(id="empty", title="Empty", passing_score=0), [])
        service = GradingService(memory_store, EventBus())

        result = await service.grade("empty", {}, learner_id)

        assert result.score == 0
        assert result.passed is False

    @pytest.mark.asyncio
    async def test_unknown_quiz(self, grading_service: GradingService, learner_id: str) -> None:
        with pytest.raises(QuizNotFoundError):
            await grading_service.grade("missing", {}, learner_id)

    @pytest.mark.asyncio
    async def test_malformed_answers(self, grading_service: GradingService, learner_id: str) -> None:
        with pytest.raises(InvalidInputError):
            await grading_service.grade("quiz-basic", ["optA"], learner_id)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_learner_required(self, grading_service: GradingService) -> None:
        with pytest.raises(InvalidInputError):
            await grading_service.grade("quiz-basic", {}, "")

    @pytest.mark.asyncio
    async def test_records_submission(
        self,
        grading_service: GradingService,
        quiz_store: InMemoryLearningStore,
        learner_id: str,
    ) -> None:
        result = await grading_service.grade("quiz-basic", {"q1": "optA"}, learner_id)

        submissions = await quiz_store.list_submissions(learner_id, "quiz-basic")
        assert len(submissions) == 1
        assert submissions[0].id == result.submission_id
        assert submissions[0].score == 50
        assert submissions[0].passed is False

    @pytest.mark.asyncio
    async def test_submission_write_failure_still_returns_grade(
        self,
        quiz_store: InMemoryLearningStore,
        learner_id: str,
    ) -> None:
        quiz_store.save_submission = AsyncMock(  # type: ignore[method-assign]
            side_effect=PersistenceError("Failed to save quiz submission"),
        )
        service = GradingService(quiz_store, EventBus())

        result = await service.grade("quiz-basic", {"q1": "optA", "q2": "optB"}, learner_id)

        assert result == GradeResult(score=100, passed=True, passing_score=70, submission_id=None)

    @pytest.mark.asyncio
    async def test_quiz_read_failure_propagates(self, learner_id: str) -> None:
        store = MagicMock()
        store.get_quiz = AsyncMock(side_effect=PersistenceError("Failed to load quiz"))
        service = GradingService(store, EventBus())

        with pytest.raises(PersistenceError):
            await service.grade("quiz-basic", {}, learner_id)

    @pytest.mark.asyncio
    async def test_publishes_graded_event(
        self,
        grading_service: GradingService,
        event_bus: EventBus,
        learner_id: str,
    ) -> None:
        received = []

        async def handler(event) -> None:
            received.append(event)

        event_bus.subscribe(EventTypes.Quiz.SUBMISSION_GRADED, handler)

        await grading_service.grade("quiz-basic", {"q1": "optA", "q2": "optB"}, learner_id)

        assert len(received) == 1
        assert received[0].learner_id == learner_id
        assert received[0].payload["quiz_id"] == "quiz-basic"
        assert received[0].payload["score"] == 100
        assert received[0].payload["passed"] is True


class TestAttemptPinning:
    """Tests for grading against the questions of an attempt."""

    @pytest.mark.asyncio
    async def test_grades_only_pinned_questions(
        self,
        grading_service: GradingService,
        quiz_store: InMemoryLearningStore,
        learner_id: str,
    ) -> None:
        await quiz_store.save_attempt(
            AttemptRecord(id="att-1", quiz_id="quiz-basic", learner_id=learner_id, question_ids=["q2"])
        )

        result = await grading_service.grade(
            "quiz-basic",
            {"q1": "optX", "q2": "optB"},
            learner_id,
            attempt_id="att-1",
        )

        assert result.score == 100
        assert result.passed is True

    @pytest.mark.asyncio
    async def test_unknown_attempt(self, grading_service: GradingService, learner_id: str) -> None:
        with pytest.raises(AttemptNotFoundError):
            await grading_service.grade("quiz-basic", {}, learner_id, attempt_id="missing")

    @pytest.mark.asyncio
    async def test_attempt_of_other_learner(
        self,
        grading_service: GradingService,
        quiz_store: InMemoryLearningStore,
    ) -> None:
        await quiz_store.save_attempt(
            AttemptRecord(id="att-1", quiz_id="quiz-basic", learner_id="someone-else", question_ids=["q1"])
        )

        with pytest.raises(InvalidInputError):
            await grading_service.grade("quiz-basic", {}, "me", attempt_id="att-1")

    @pytest.mark.asyncio
    async def test_attempt_of_other_quiz(
        self,
        grading_service: GradingService,
        quiz_store: InMemoryLearningStore,
        learner_id: str,
    ) -> None:
        await quiz_store.save_quiz(QuizRecord(id="other", title="Other"), [])
        await quiz_store.save_attempt(
            AttemptRecord(id="att-1", quiz_id="other", learner_id=learner_id, question_ids=[])
        )

        with pytest.raises(InvalidInputError):
            await grading_service.grade("quiz-basic", {}, learner_id, attempt_id="att-1")

    @pytest.mark.asyncio
    async def test_randomized_quiz_requires_attempt(
        self,
        memory_store: InMemoryLearningStore,
        question_factory,
        learner_id: str,
    ) -> None:
        await memory_store.save_quiz(
            QuizRecord(id="rand", title="Random", randomize=True, question_count=1),
            [question_factory("rand", "r1", "a", ["x"])],
        )
        service = GradingService(memory_store, EventBus())

        with pytest.raises(InvalidInputError):
            await service.grade("rand", {"r1": "a"}, learner_id)
