# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial learning database schema.

Creates course structure, quiz, attempt, submission and lesson progress
tables.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-03-02
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    """Create learning tables."""

    # =========================================================================
    # COURSE STRUCTURE
    # =========================================================================

    op.create_table(
        "courses",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("thumbnail_url", sa.Text, nullable=True),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default="false"),
        *_timestamps(),
    )

    op.create_table(
        "course_modules",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "course_id",
            sa.String(64),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("order_index", sa.Integer, nullable=False),
    )
    op.create_index("ix_course_modules_course_id", "course_modules", ["course_id"])

    # =========================================================================
    # QUIZZES
    # =========================================================================

    op.create_table(
        "quizzes",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("passing_score", sa.Integer, nullable=False, server_default="70"),
        sa.Column("randomize", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("question_count", sa.Integer, nullable=False, server_default="10"),
        *_timestamps(),
        sa.CheckConstraint("passing_score BETWEEN 0 AND 100", name="ck_quizzes_passing_score"),
        sa.CheckConstraint("question_count >= 1", name="ck_quizzes_question_count"),
    )

    op.create_table(
        "lessons",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "module_id",
            sa.String(64),
            sa.ForeignKey("course_modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content_type", sa.String(10), nullable=False),
        sa.Column("content_body", sa.Text, nullable=False, server_default=""),
        sa.Column(
            "quiz_id",
            sa.String(64),
            sa.ForeignKey("quizzes.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("order_index", sa.Integer, nullable=False),
        sa.CheckConstraint(
            "content_type IN ('VIDEO', 'TEXT', 'QUIZ', 'SCORM')",
            name="ck_lessons_content_type",
        ),
    )
    op.create_index("ix_lessons_module_id", "lessons", ["module_id"])

    op.create_table(
        "quiz_questions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "quiz_id",
            sa.String(64),
            sa.ForeignKey("quizzes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("kind", sa.String(5), nullable=False),
        sa.Column("points", sa.Integer, nullable=False, server_default="1"),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.CheckConstraint("kind IN ('MCQ', 'TF')", name="ck_quiz_questions_kind"),
        sa.CheckConstraint("points > 0", name="ck_quiz_questions_points"),
    )
    op.create_index("ix_quiz_questions_quiz_id", "quiz_questions", ["quiz_id"])

    op.create_table(
        "question_options",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "question_id",
            sa.String(64),
            sa.ForeignKey("quiz_questions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("is_correct", sa.Boolean, nullable=False),
    )
    op.create_index("ix_question_options_question_id", "question_options", ["question_id"])

    # =========================================================================
    # ATTEMPTS AND SUBMISSIONS
    # =========================================================================

    op.create_table(
        "quiz_attempts",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "quiz_id",
            sa.String(64),
            sa.ForeignKey("quizzes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("learner_id", sa.String(64), nullable=False),
        sa.Column("question_ids", postgresql.JSONB, nullable=False, server_default="[]"),
        sa.Column(
            "started_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index("ix_quiz_attempts_quiz_id", "quiz_attempts", ["quiz_id"])
    op.create_index("ix_quiz_attempts_learner_id", "quiz_attempts", ["learner_id"])

    op.create_table(
        "quiz_submissions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("learner_id", sa.String(64), nullable=False),
        sa.Column(
            "quiz_id",
            sa.String(64),
            sa.ForeignKey("quizzes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "attempt_id",
            sa.String(64),
            sa.ForeignKey("quiz_attempts.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("passed", sa.Boolean, nullable=False),
        sa.Column(
            "submitted_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("score BETWEEN 0 AND 100", name="ck_quiz_submissions_score"),
    )
    op.create_index("ix_quiz_submissions_learner_id", "quiz_submissions", ["learner_id"])
    op.create_index("ix_quiz_submissions_quiz_id", "quiz_submissions", ["quiz_id"])

    # =========================================================================
    # PROGRESS
    # =========================================================================

    op.create_table(
        "lesson_progress",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("learner_id", sa.String(64), nullable=False),
        sa.Column(
            "course_id",
            sa.String(64),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("lesson_id", sa.String(64), nullable=False),
        sa.Column(
            "completed_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint(
            "learner_id",
            "course_id",
            "lesson_id",
            name="uq_lesson_progress_learner_course_lesson",
        ),
    )
    op.create_index(
        "ix_lesson_progress_learner_course",
        "lesson_progress",
        ["learner_id", "course_id"],
    )


def downgrade() -> None:
    """Drop learning tables in reverse dependency order."""
    op.drop_index("ix_lesson_progress_learner_course", table_name="lesson_progress")
    op.drop_table("lesson_progress")

    op.drop_index("ix_quiz_submissions_quiz_id", table_name="quiz_submissions")
    op.drop_index("ix_quiz_submissions_learner_id", table_name="quiz_submissions")
    op.drop_table("quiz_submissions")

    op.drop_index("ix_quiz_attempts_learner_id", table_name="quiz_attempts")
    op.drop_index("ix_quiz_attempts_quiz_id", table_name="quiz_attempts")
    op.drop_table("quiz_attempts")

    op.drop_index("ix_question_options_question_id", table_name="question_options")
    op.drop_table("question_options")

    op.drop_index("ix_quiz_questions_quiz_id", table_name="quiz_questions")
    op.drop_table("quiz_questions")

    op.drop_index("ix_lessons_module_id", table_name="lessons")
    op.drop_table("lessons")

    op.drop_table("quizzes")

    op.drop_index("ix_course_modules_course_id", table_name="course_modules")
    op.drop_table("course_modules")

    op.drop_table("courses")
