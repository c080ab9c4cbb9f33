# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz models: quizzes, questions, options, attempts and submissions."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from apexlms.infrastructure.database.models.base import Base, IdMixin, TimestampMixin
from apexlms.utils.datetime import utc_now


class Quiz(IdMixin, TimestampMixin, Base):
    """Quiz definition with its passing threshold and sampling options."""

    __tablename__ = "quizzes"
    __table_args__ = (
        CheckConstraint(
            "passing_score BETWEEN 0 AND 100",
            name="ck_quizzes_passing_score",
        ),
        CheckConstraint("question_count >= 1", name="ck_quizzes_question_count"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    passing_score: Mapped[int] = mapped_column(Integer, nullable=False, default=70)
    randomize: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    question_count: Mapped[int] = mapped_column(Integer, nullable=False, default=10)

    questions: Mapped[list["QuizQuestion"]] = relationship(
        back_populates="quiz",
        order_by="QuizQuestion.position",
        cascade="all, delete-orphan",
    )


class QuizQuestion(IdMixin, Base):
    """A gradable question belonging to a quiz."""

    __tablename__ = "quiz_questions"
    __table_args__ = (
        CheckConstraint("kind IN ('MCQ', 'TF')", name="ck_quiz_questions_kind"),
        CheckConstraint("points > 0", name="ck_quiz_questions_points"),
    )

    quiz_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("quizzes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    kind: Mapped[str] = mapped_column(String(5), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    quiz: Mapped[Quiz] = relationship(back_populates="questions")
    options: Mapped[list["QuestionOption"]] = relationship(
        back_populates="question",
        cascade="all, delete-orphan",
    )


class QuestionOption(IdMixin, Base):
    """An answer option; exactly one per question is correct."""

    __tablename__ = "question_options"

    question_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("quiz_questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)

    question: Mapped[QuizQuestion] = relationship(back_populates="options")


class QuizAttempt(IdMixin, Base):
    """The question set presented to a learner for one attempt."""

    __tablename__ = "quiz_attempts"

    quiz_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("quizzes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    learner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    question_ids: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )


class QuizSubmission(IdMixin, Base):
    """Write-once record of a graded quiz attempt."""

    __tablename__ = "quiz_submissions"
    __table_args__ = (
        CheckConstraint("score BETWEEN 0 AND 100", name="ck_quiz_submissions_score"),
    )

    learner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    quiz_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("quizzes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attempt_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("quiz_attempts.id", ondelete="SET NULL"),
        nullable=True,
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
