# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics service for the admin dashboard."""

import logging

from apexlms.domains.grading.service import percent
from apexlms.infrastructure.storage import LearningStore
from apexlms.models.analytics import LearningStatsResponse

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Service for platform-wide learning counts.

    Attributes:
        store: Learning store.
    """

    def __init__(self, store: LearningStore) -> None:
        self.store = store

    async def get_stats(self, active_users: int = 0) -> LearningStatsResponse:
        """Summarize courses, learners and quiz outcomes.

        Args:
            active_users: Users currently online, supplied by the caller
                since presence lives outside the store.

        Returns:
            Dashboard counts with the pass rate rounded half-up.

        Raises:
            PersistenceError: If the store cannot be read.
        """
        stats = await self.store.get_stats()

        logger.debug(
            "Computed learning stats: courses=%d, learners=%d, submissions=%d",
            stats.total_courses,
            stats.total_learners,
            stats.total_submissions,
        )

        return LearningStatsResponse(
            total_courses=stats.total_courses,
            published_courses=stats.published_courses,
            total_learners=stats.total_learners,
            active_users=active_users,
            lessons_completed=stats.lessons_completed,
            total_submissions=stats.total_submissions,
            pass_rate=percent(stats.passed_submissions, stats.total_submissions),
        )
