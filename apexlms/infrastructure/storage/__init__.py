# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning store implementations.

Example:
    from apexlms.infrastructure.storage import create_learning_store

    store = create_learning_store(settings)
    quiz = await store.get_quiz("quiz-1")
"""

import logging
from typing import TYPE_CHECKING

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
    new_id,
)
from apexlms.infrastructure.storage.memory import InMemoryLearningStore
from apexlms.infrastructure.storage.relational import SQLAlchemyLearningStore

if TYPE_CHECKING:
    from apexlms.core.config.settings import Settings

logger = logging.getLogger(__name__)


def create_learning_store(settings: "Settings") -> LearningStore:
    """Create the learning store selected by the storage settings.

    Args:
        settings: Application settings.

    Returns:
        A learning store instance. The relational store requires
        init_database() to have been called before first use.
    """
    backend = settings.storage.backend
    if backend == "memory":
        logger.warning("Using in-memory learning store; data is not persisted")
        return InMemoryLearningStore()

    logger.info("Using relational learning store")
    return SQLAlchemyLearningStore()


__all__ = [
    "AttemptRecord",
    "CourseRecord",
    "InMemoryLearningStore",
    "LearningStats",
    "LearningStore",
    "LessonRecord",
    "ModuleRecord",
    "OptionRecord",
    "QuestionRecord",
    "QuizRecord",
    "SQLAlchemyLearningStore",
    "SubmissionRecord",
    "create_learning_store",
    "new_id",
]
