# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lesson gate: sequential unlock rules for a course.

A learner may open a lesson when it is already completed, when it is the
first lesson of the course, or when the lesson immediately before it has
been completed. A completed lesson stays open even if earlier lessons are
not, so learners can always revisit what they finished.

All functions are pure and are evaluated on every request; nothing here is
cached.

Example:
    >>> sequence = ["l1", "l2", "l3"]
    >>> is_unlocked("l2", sequence, {"l1"})
    True
    >>> lesson_state("l3", sequence, {"l1"})
    <LessonState.LOCKED: 'LOCKED'>
"""

from collections.abc import Collection, Iterable, Sequence
from enum import Enum
from typing import Protocol


class LessonState(str, Enum):
    """Lesson state as seen by one learner."""

    LOCKED = "LOCKED"
    UNLOCKED = "UNLOCKED"
    COMPLETED = "COMPLETED"


class _OrderedLesson(Protocol):
    id: str
    order_index: int


class _OrderedModule(Protocol):
    order_index: int
    lessons: Sequence[_OrderedLesson]


def build_sequence(modules: Iterable[_OrderedModule]) -> list[str]:
    """Flatten a course outline into its lesson sequence.

    Lessons are ordered by (module.order_index, lesson.order_index).

    Args:
        modules: Modules with their lessons.

    Returns:
        Lesson identifiers in course order.
    """
    ordered_modules = sorted(modules, key=lambda m: m.order_index)
    return [
        lesson.id
        for module in ordered_modules
        for lesson in sorted(module.lessons, key=lambda lesson: lesson.order_index)
    ]


def is_unlocked(
    lesson_id: str,
    sequence: Sequence[str],
    completed: Collection[str],
) -> bool:
    """Decide whether a learner may open a lesson.

    Args:
        lesson_id: Lesson to check.
        sequence: Lesson identifiers in course order.
        completed: Lesson identifiers the learner completed in this course.

    Returns:
        True if the lesson may be opened.
    """
    if lesson_id in completed:
        return True

    try:
        index = sequence.index(lesson_id)
    except ValueError:
        return False

    if index == 0:
        return True
    return sequence[index - 1] in completed


def lesson_state(
    lesson_id: str,
    sequence: Sequence[str],
    completed: Collection[str],
) -> LessonState:
    """Classify one lesson as completed, unlocked or locked."""
    if lesson_id in completed:
        return LessonState.COMPLETED
    if is_unlocked(lesson_id, sequence, completed):
        return LessonState.UNLOCKED
    return LessonState.LOCKED


def lesson_states(
    sequence: Sequence[str],
    completed: Collection[str],
) -> list[tuple[str, LessonState]]:
    """Classify every lesson of a sequence, in order."""
    return [
        (lesson_id, lesson_state(lesson_id, sequence, completed))
        for lesson_id in sequence
    ]
