# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admin dashboard API models."""

from pydantic import BaseModel


class LearningStatsResponse(BaseModel):
    """Platform-wide learning counts.

    Attributes:
        total_courses: All courses, drafts included.
        published_courses: Courses visible to learners.
        total_learners: Distinct learners with progress or submissions.
        active_users: Users joined to the presence channel right now.
        lessons_completed: Lesson completion records.
        total_submissions: Graded quiz submissions.
        pass_rate: Percentage of submissions that passed, 0 when none exist.
    """

    total_courses: int
    published_courses: int
    total_learners: int
    active_users: int
    lessons_completed: int
    total_submissions: int
    pass_rate: int
