# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course structure models: courses, modules and lessons.

Lesson order inside a course is defined by (module.order_index,
lesson.order_index).
"""

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from apexlms.infrastructure.database.models.base import Base, IdMixin, TimestampMixin

LESSON_CONTENT_TYPES = ("VIDEO", "TEXT", "QUIZ", "SCORM")


class Course(IdMixin, TimestampMixin, Base):
    """A course made of ordered modules."""

    __tablename__ = "courses"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    thumbnail_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    modules: Mapped[list["CourseModule"]] = relationship(
        back_populates="course",
        order_by="CourseModule.order_index",
        cascade="all, delete-orphan",
    )


class CourseModule(IdMixin, Base):
    """A module groups ordered lessons within a course."""

    __tablename__ = "course_modules"

    course_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)

    course: Mapped[Course] = relationship(back_populates="modules")
    lessons: Mapped[list["Lesson"]] = relationship(
        back_populates="module",
        order_by="Lesson.order_index",
        cascade="all, delete-orphan",
    )


class Lesson(IdMixin, Base):
    """A single unit of delivered content."""

    __tablename__ = "lessons"
    __table_args__ = (
        CheckConstraint(
            "content_type IN ('VIDEO', 'TEXT', 'QUIZ', 'SCORM')",
            name="ck_lessons_content_type",
        ),
    )

    module_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("course_modules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(10), nullable=False)
    content_body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    quiz_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("quizzes.id", ondelete="SET NULL"),
        nullable=True,
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)

    module: Mapped[CourseModule] = relationship(back_populates="lessons")
