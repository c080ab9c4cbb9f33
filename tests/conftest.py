# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from collections.abc import Iterator

import pytest
import pytest_asyncio

from apexlms.api.v1.presence import reset_presence_hub
from apexlms.core.config import clear_settings_cache
from apexlms.infrastructure.events import EventBus, reset_event_bus
from apexlms.infrastructure.storage import (
    CourseRecord,
    InMemoryLearningStore,
    LessonRecord,
    ModuleRecord,
    OptionRecord,
    QuestionRecord,
    QuizRecord,
)


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (in-process app)"
    )


# =============================================================================
# Process-wide State
# =============================================================================


@pytest.fixture(autouse=True)
def reset_singletons() -> Iterator[None]:
    """Start every test with a fresh event bus, presence hub and settings."""
    reset_event_bus()
    reset_presence_hub()
    clear_settings_cache()
    yield
    reset_presence_hub()
    reset_event_bus()
    clear_settings_cache()


# =============================================================================
# Storage Fixtures
# =============================================================================


def make_question(
    quiz_id: str,
    question_id: str,
    correct: str,
    others: list[str],
    points: int = 1,
    position: int = 0,
    kind: str = "MCQ",
) -> QuestionRecord:
    """Build a question whose option ids double as their text."""
    options = [OptionRecord(id=correct, question_id=question_id, text=correct, is_correct=True)]
    options += [
        OptionRecord(id=other, question_id=question_id, text=other, is_correct=False)
        for other in others
    ]
    return QuestionRecord(
        id=question_id,
        quiz_id=quiz_id,
        text=f"Question {question_id}",
        kind=kind,
        points=points,
        position=position,
        options=options,
    )


@pytest.fixture
def question_factory():
    """Provide the question builder to tests."""
    return make_question


@pytest.fixture
def event_bus() -> EventBus:
    """Provide an isolated event bus."""
    return EventBus()


@pytest.fixture
def memory_store() -> InMemoryLearningStore:
    """Provide an empty in-memory learning store."""
    return InMemoryLearningStore()


@pytest_asyncio.fixture
async def quiz_store(memory_store: InMemoryLearningStore) -> InMemoryLearningStore:
    """Store holding quiz "quiz-basic": q1 -> optA, q2 -> optB, passing 70."""
    await memory_store.save_quiz(
        QuizRecord(id="quiz-basic", title="Basics", passing_score=70),
        [
            make_question("quiz-basic", "q1", "optA", ["optX"], position=0),
            make_question("quiz-basic", "q2", "optB", ["optX"], position=1),
        ],
    )
    return memory_store


@pytest_asyncio.fixture
async def course_store(quiz_store: InMemoryLearningStore) -> InMemoryLearningStore:
    """Store holding course "course-1" with lessons l1, l2 (module 0) and l3 (module 1)."""
    await quiz_store.save_course(
        CourseRecord(id="course-1", title="Course One", is_published=True),
        [
            ModuleRecord(
                id="m2",
                course_id="course-1",
                title="Second",
                order_index=1,
                lessons=[
                    LessonRecord(
                        id="l3",
                        module_id="m2",
                        title="Quiz",
                        content_type="QUIZ",
                        quiz_id="quiz-basic",
                        order_index=0,
                    ),
                ],
            ),
            ModuleRecord(
                id="m1",
                course_id="course-1",
                title="First",
                order_index=0,
                lessons=[
                    LessonRecord(id="l2", module_id="m1", title="Two", content_type="TEXT", order_index=1),
                    LessonRecord(id="l1", module_id="m1", title="One", content_type="VIDEO", order_index=0),
                ],
            ),
        ],
    )
    await quiz_store.save_course(
        CourseRecord(id="course-draft", title="Draft Course", is_published=False),
        [],
    )
    return quiz_store


@pytest.fixture
def learner_id() -> str:
    """Provide a sample learner ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"
