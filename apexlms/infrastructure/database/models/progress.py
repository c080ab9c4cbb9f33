# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lesson progress model.

One row per (learner, course, lesson). The unique constraint is what makes
concurrent duplicate completions collapse into a single record.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from apexlms.infrastructure.database.models.base import Base, IdMixin
from apexlms.utils.datetime import utc_now

PROGRESS_UNIQUE_CONSTRAINT = "uq_lesson_progress_learner_course_lesson"


class LessonProgress(IdMixin, Base):
    """A lesson completed by a learner in a course."""

    __tablename__ = "lesson_progress"
    __table_args__ = (
        UniqueConstraint(
            "learner_id",
            "course_id",
            "lesson_id",
            name=PROGRESS_UNIQUE_CONSTRAINT,
        ),
        Index("ix_lesson_progress_learner_course", "learner_id", "course_id"),
    )

    learner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    course_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    lesson_id: Mapped[str] = mapped_column(String(64), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
