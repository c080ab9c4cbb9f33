# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admin API endpoints.

This module provides endpoints for instructors and administrators:
- GET /stats - Dashboard counts
"""

import logging

from fastapi import APIRouter, Depends

from apexlms.api.dependencies import get_analytics_service, require_author
from apexlms.api.middleware.auth import CurrentUser
from apexlms.api.v1.presence import get_presence_hub
from apexlms.domains.analytics import AnalyticsService
from apexlms.models.analytics import LearningStatsResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/stats",
    response_model=LearningStatsResponse,
    summary="Get dashboard stats",
    description="Course, learner and quiz counts with the users online right now.",
)
async def get_stats(
    current_user: CurrentUser = Depends(require_author),
    service: AnalyticsService = Depends(get_analytics_service),
) -> LearningStatsResponse:
    """Get dashboard counts."""
    active_users = len(get_presence_hub().online_users())
    return await service.get_stats(active_users=active_users)
