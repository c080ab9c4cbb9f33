# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Relational learning store using SQLAlchemy async.

Reads and writes the learning tables through short-lived sessions obtained
from a session factory (by default get_session from the connection module).
Every SQLAlchemy or connection failure is raised as PersistenceError.

Lesson completion relies on the lesson_progress unique constraint: the row is
inserted with ON CONFLICT DO NOTHING, so concurrent duplicates collapse into
one record without any application-level locking.
"""

import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import AsyncIterator, Callable

from sqlalchemy import delete, func, select, text, union, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from apexlms.domains.errors import PersistenceError
from apexlms.infrastructure.database.connection import DatabaseError, get_session
from apexlms.infrastructure.database.models import (
    PROGRESS_UNIQUE_CONSTRAINT,
    Course,
    CourseModule,
    Lesson,
    LessonProgress,
    QuestionOption,
    Quiz,
    QuizAttempt,
    QuizQuestion,
    QuizSubmission,
    generate_id,
)
from apexlms.infrastructure.storage.base import (
    AttemptRecord,
    CourseRecord,
    LearningStats,
    LearningStore,
    LessonRecord,
    ModuleRecord,
    OptionRecord,
    QuestionRecord,
    QuizRecord,
    SubmissionRecord,
)
from apexlms.utils.datetime import utc_now

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def _quiz_record(quiz: Quiz) -> QuizRecord:
    return QuizRecord(
        id=quiz.id,
        title=quiz.title,
        passing_score=quiz.passing_score,
        randomize=quiz.randomize,
        question_count=quiz.question_count,
    )


def _question_record(question: QuizQuestion) -> QuestionRecord:
    return QuestionRecord(
        id=question.id,
        quiz_id=question.quiz_id,
        text=question.text,
        kind=question.kind,
        points=question.points,
        position=question.position,
        options=[
            OptionRecord(
                id=option.id,
                question_id=option.question_id,
                text=option.text,
                is_correct=option.is_correct,
            )
            for option in question.options
        ],
    )


def _attempt_record(attempt: QuizAttempt) -> AttemptRecord:
    return AttemptRecord(
        id=attempt.id,
        quiz_id=attempt.quiz_id,
        learner_id=attempt.learner_id,
        question_ids=list(attempt.question_ids),
        started_at=attempt.started_at,
    )


def _submission_record(submission: QuizSubmission) -> SubmissionRecord:
    return SubmissionRecord(
        id=submission.id,
        learner_id=submission.learner_id,
        quiz_id=submission.quiz_id,
        attempt_id=submission.attempt_id,
        score=submission.score,
        passed=submission.passed,
        submitted_at=submission.submitted_at,
    )


def _course_record(course: Course) -> CourseRecord:
    return CourseRecord(
        id=course.id,
        title=course.title,
        description=course.description,
        thumbnail_url=course.thumbnail_url,
        is_published=course.is_published,
    )


def _module_record(module: CourseModule) -> ModuleRecord:
    return ModuleRecord(
        id=module.id,
        course_id=module.course_id,
        title=module.title,
        order_index=module.order_index,
        lessons=[
            LessonRecord(
                id=lesson.id,
                module_id=lesson.module_id,
                title=lesson.title,
                content_type=lesson.content_type,
                content_body=lesson.content_body,
                quiz_id=lesson.quiz_id,
                order_index=lesson.order_index,
            )
            for lesson in module.lessons
        ],
    )


class SQLAlchemyLearningStore(LearningStore):
    """Learning store backed by the relational database.

    Attributes:
        session_factory: Callable returning an async context manager that
            yields a session and commits on exit.
    """

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        """Initialize the store.

        Args:
            session_factory: Session factory. Defaults to the application
                connection pool via get_session.
        """
        self.session_factory = session_factory or get_session

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session and translate storage failures.

        Args:
            operation: Short description used in the error message.

        Raises:
            PersistenceError: If the database fails.
        """
        try:
            async with self.session_factory() as session:
                yield session
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error("Learning store failed to %s: %s", operation, e)
            raise PersistenceError(f"Failed to {operation}", e) from e

    # ------------------------------------------------------------------
    # Quizzes
    # ------------------------------------------------------------------

    async def get_quiz(self, quiz_id: str) -> QuizRecord | None:
        async with self._session("load quiz") as session:
            quiz = await session.get(Quiz, quiz_id)
            return _quiz_record(quiz) if quiz else None

    async def get_questions(
        self,
        quiz_id: str,
        question_ids: list[str] | None = None,
    ) -> list[QuestionRecord]:
        if question_ids is not None and not question_ids:
            return []

        stmt = (
            select(QuizQuestion)
            .options(selectinload(QuizQuestion.options))
            .where(QuizQuestion.quiz_id == quiz_id)
            .order_by(QuizQuestion.position)
        )
        if question_ids is not None:
            stmt = stmt.where(QuizQuestion.id.in_(question_ids))

        async with self._session("load quiz questions") as session:
            result = await session.execute(stmt)
            questions = [_question_record(q) for q in result.scalars().all()]

        if question_ids is None:
            return questions

        by_id = {question.id: question for question in questions}
        return [by_id[qid] for qid in question_ids if qid in by_id]

    async def save_quiz(self, quiz: QuizRecord, questions: list[QuestionRecord]) -> None:
        model = Quiz(
            id=quiz.id,
            title=quiz.title,
            passing_score=quiz.passing_score,
            randomize=quiz.randomize,
            question_count=quiz.question_count,
        )
        model.questions = [
            QuizQuestion(
                id=question.id,
                text=question.text,
                kind=question.kind,
                points=question.points,
                position=question.position,
                options=[
                    QuestionOption(
                        id=option.id,
                        text=option.text,
                        is_correct=option.is_correct,
                    )
                    for option in question.options
                ],
            )
            for question in questions
        ]

        async with self._session("save quiz") as session:
            session.add(model)

        logger.info("Saved quiz %s with %d questions", quiz.id, len(questions))

    # ------------------------------------------------------------------
    # Attempts and submissions
    # ------------------------------------------------------------------

    async def save_attempt(self, attempt: AttemptRecord) -> None:
        async with self._session("save quiz attempt") as session:
            session.add(
                QuizAttempt(
                    id=attempt.id,
                    quiz_id=attempt.quiz_id,
                    learner_id=attempt.learner_id,
                    question_ids=list(attempt.question_ids),
                    started_at=attempt.started_at,
                )
            )

    async def get_attempt(self, attempt_id: str) -> AttemptRecord | None:
        async with self._session("load quiz attempt") as session:
            attempt = await session.get(QuizAttempt, attempt_id)
            return _attempt_record(attempt) if attempt else None

    async def save_submission(self, submission: SubmissionRecord) -> None:
        async with self._session("save quiz submission") as session:
            session.add(
                QuizSubmission(
                    id=submission.id,
                    learner_id=submission.learner_id,
                    quiz_id=submission.quiz_id,
                    attempt_id=submission.attempt_id,
                    score=submission.score,
                    passed=submission.passed,
                    submitted_at=submission.submitted_at,
                )
            )

    async def list_submissions(self, learner_id: str, quiz_id: str) -> list[SubmissionRecord]:
        stmt = (
            select(QuizSubmission)
            .where(
                QuizSubmission.learner_id == learner_id,
                QuizSubmission.quiz_id == quiz_id,
            )
            .order_by(QuizSubmission.submitted_at)
        )
        async with self._session("list quiz submissions") as session:
            result = await session.execute(stmt)
            return [_submission_record(s) for s in result.scalars().all()]

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    async def add_progress(self, learner_id: str, course_id: str, lesson_id: str) -> bool:
        stmt = (
            insert(LessonProgress)
            .values(
                id=generate_id(),
                learner_id=learner_id,
                course_id=course_id,
                lesson_id=lesson_id,
                completed_at=utc_now(),
            )
            .on_conflict_do_nothing(constraint=PROGRESS_UNIQUE_CONSTRAINT)
            .returning(LessonProgress.id)
        )
        async with self._session("record lesson progress") as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none() is not None

    async def list_progress(self, learner_id: str, course_id: str) -> set[str]:
        stmt = select(LessonProgress.lesson_id).where(
            LessonProgress.learner_id == learner_id,
            LessonProgress.course_id == course_id,
        )
        async with self._session("list lesson progress") as session:
            result = await session.execute(stmt)
            return set(result.scalars().all())

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    async def get_course(self, course_id: str) -> CourseRecord | None:
        async with self._session("load course") as session:
            course = await session.get(Course, course_id)
            return _course_record(course) if course else None

    async def list_courses(self, published_only: bool = True) -> list[CourseRecord]:
        stmt = select(Course).order_by(Course.title)
        if published_only:
            stmt = stmt.where(Course.is_published.is_(True))

        async with self._session("list courses") as session:
            result = await session.execute(stmt)
            return [_course_record(c) for c in result.scalars().all()]

    async def get_course_outline(self, course_id: str) -> list[ModuleRecord]:
        stmt = (
            select(CourseModule)
            .options(selectinload(CourseModule.lessons))
            .where(CourseModule.course_id == course_id)
            .order_by(CourseModule.order_index)
        )
        async with self._session("load course outline") as session:
            result = await session.execute(stmt)
            return [_module_record(m) for m in result.scalars().all()]

    async def save_course(self, course: CourseRecord, modules: list[ModuleRecord]) -> None:
        model = Course(
            id=course.id,
            title=course.title,
            description=course.description,
            thumbnail_url=course.thumbnail_url,
            is_published=course.is_published,
        )
        model.modules = [
            CourseModule(
                id=module.id,
                title=module.title,
                order_index=module.order_index,
                lessons=[
                    Lesson(
                        id=lesson.id,
                        title=lesson.title,
                        content_type=lesson.content_type,
                        content_body=lesson.content_body,
                        quiz_id=lesson.quiz_id,
                        order_index=lesson.order_index,
                    )
                    for lesson in module.lessons
                ],
            )
            for module in modules
        ]

        async with self._session("save course") as session:
            session.add(model)

        logger.info("Saved course %s with %d modules", course.id, len(modules))

    async def update_course(self, course: CourseRecord) -> bool:
        stmt = (
            update(Course)
            .where(Course.id == course.id)
            .values(
                title=course.title,
                description=course.description,
                thumbnail_url=course.thumbnail_url,
                is_published=course.is_published,
                updated_at=utc_now(),
            )
        )
        async with self._session("update course") as session:
            result = await session.execute(stmt)
            return result.rowcount > 0

    async def delete_course(self, course_id: str) -> bool:
        # Modules, lessons and progress rows go with it through ON DELETE CASCADE.
        stmt = delete(Course).where(Course.id == course_id)
        async with self._session("delete course") as session:
            result = await session.execute(stmt)
            deleted = result.rowcount > 0

        if deleted:
            logger.info("Deleted course %s", course_id)
        return deleted

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    async def get_stats(self) -> LearningStats:
        learners = union(
            select(LessonProgress.learner_id),
            select(QuizSubmission.learner_id),
        ).subquery()
        counts = {
            "total_courses": select(func.count()).select_from(Course),
            "published_courses": select(func.count())
            .select_from(Course)
            .where(Course.is_published.is_(True)),
            "total_learners": select(func.count()).select_from(learners),
            "lessons_completed": select(func.count()).select_from(LessonProgress),
            "total_submissions": select(func.count()).select_from(QuizSubmission),
            "passed_submissions": select(func.count())
            .select_from(QuizSubmission)
            .where(QuizSubmission.passed.is_(True)),
        }

        async with self._session("count learning stats") as session:
            values = {name: await session.scalar(stmt) or 0 for name, stmt in counts.items()}
        return LearningStats(**values)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def ping(self) -> bool:
        try:
            async with self._session("ping database") as session:
                await session.execute(text("SELECT 1"))
            return True
        except PersistenceError:
            return False
