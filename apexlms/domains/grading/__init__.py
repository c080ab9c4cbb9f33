# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grading domain package.

This package grades quiz submissions and records them.
"""

from apexlms.domains.grading.service import GradeResult, GradingService, percent, tally_points

__all__ = [
    "GradeResult",
    "GradingService",
    "percent",
    "tally_points",
]
