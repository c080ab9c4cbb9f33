# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory learning store.

Keeps all learning data in per-instance dictionaries. Data is lost when the
process exits, so this backend is meant for development, demos and tests.

All writes happen without awaiting in between, so each operation is atomic
with respect to other coroutines on the same event loop.
"""

import copy
import logging

from apexlms.infrastructure.storage.base import (
    AttemptRecord,
    CourseRecord,
    LearningStats,
    LearningStore,
    ModuleRecord,
    QuestionRecord,
    QuizRecord,
    SubmissionRecord,
)

logger = logging.getLogger(__name__)


class InMemoryLearningStore(LearningStore):
    """Learning store backed by process memory.

    Records are copied on the way in and on the way out so callers can
    never mutate stored state.
    """

    def __init__(self) -> None:
        self._quizzes: dict[str, QuizRecord] = {}
        self._questions: dict[str, list[QuestionRecord]] = {}
        self._attempts: dict[str, AttemptRecord] = {}
        self._submissions: list[SubmissionRecord] = []
        self._progress: set[tuple[str, str, str]] = set()
        self._courses: dict[str, CourseRecord] = {}
        self._outlines: dict[str, list[ModuleRecord]] = {}

    # Quizzes

    async def get_quiz(self, quiz_id: str) -> QuizRecord | None:
        quiz = self._quizzes.get(quiz_id)
        return copy.deepcopy(quiz) if quiz else None

    async def get_questions(
        self,
        quiz_id: str,
        question_ids: list[str] | None = None,
    ) -> list[QuestionRecord]:
        bank = self._questions.get(quiz_id, [])
        if question_ids is None:
            selected = bank
        else:
            by_id = {question.id: question for question in bank}
            selected = [by_id[qid] for qid in question_ids if qid in by_id]
        return copy.deepcopy(selected)

    async def save_quiz(self, quiz: QuizRecord, questions: list[QuestionRecord]) -> None:
        self._quizzes[quiz.id] = copy.deepcopy(quiz)
        self._questions[quiz.id] = sorted(
            copy.deepcopy(questions),
            key=lambda question: question.position,
        )
        logger.debug("Stored quiz %s with %d questions", quiz.id, len(questions))

    # Attempts and submissions

    async def save_attempt(self, attempt: AttemptRecord) -> None:
        self._attempts[attempt.id] = copy.deepcopy(attempt)

    async def get_attempt(self, attempt_id: str) -> AttemptRecord | None:
        attempt = self._attempts.get(attempt_id)
        return copy.deepcopy(attempt) if attempt else None

    async def save_submission(self, submission: SubmissionRecord) -> None:
        self._submissions.append(copy.deepcopy(submission))

    async def list_submissions(self, learner_id: str, quiz_id: str) -> list[SubmissionRecord]:
        matches = [
            s for s in self._submissions
            if s.learner_id == learner_id and s.quiz_id == quiz_id
        ]
        matches.sort(key=lambda s: s.submitted_at)
        return copy.deepcopy(matches)

    # Progress

    async def add_progress(self, learner_id: str, course_id: str, lesson_id: str) -> bool:
        key = (learner_id, course_id, lesson_id)
        if key in self._progress:
            return False
        self._progress.add(key)
        return True

    async def list_progress(self, learner_id: str, course_id: str) -> set[str]:
        return {
            lesson_id
            for learner, course, lesson_id in self._progress
            if learner == learner_id and course == course_id
        }

    # Courses

    async def get_course(self, course_id: str) -> CourseRecord | None:
        course = self._courses.get(course_id)
        return copy.deepcopy(course) if course else None

    async def list_courses(self, published_only: bool = True) -> list[CourseRecord]:
        courses = [
            c for c in self._courses.values()
            if c.is_published or not published_only
        ]
        courses.sort(key=lambda c: c.title)
        return copy.deepcopy(courses)

    async def get_course_outline(self, course_id: str) -> list[ModuleRecord]:
        return copy.deepcopy(self._outlines.get(course_id, []))

    async def save_course(self, course: CourseRecord, modules: list[ModuleRecord]) -> None:
        outline = copy.deepcopy(modules)
        outline.sort(key=lambda m: m.order_index)
        for module in outline:
            module.lessons.sort(key=lambda lesson: lesson.order_index)

        self._courses[course.id] = copy.deepcopy(course)
        self._outlines[course.id] = outline
        logger.debug("Stored course %s with %d modules", course.id, len(modules))

    async def update_course(self, course: CourseRecord) -> bool:
        if course.id not in self._courses:
            return False
        self._courses[course.id] = copy.deepcopy(course)
        return True

    async def delete_course(self, course_id: str) -> bool:
        if self._courses.pop(course_id, None) is None:
            return False
        self._outlines.pop(course_id, None)
        self._progress = {key for key in self._progress if key[1] != course_id}
        return True

    # Reporting

    async def get_stats(self) -> LearningStats:
        learners = {learner for learner, _, _ in self._progress}
        learners.update(s.learner_id for s in self._submissions)
        return LearningStats(
            total_courses=len(self._courses),
            published_courses=sum(1 for c in self._courses.values() if c.is_published),
            total_learners=len(learners),
            lessons_completed=len(self._progress),
            total_submissions=len(self._submissions),
            passed_submissions=sum(1 for s in self._submissions if s.passed),
        )

    # Lifecycle

    async def ping(self) -> bool:
        return True
