# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database seed package.

This package contains demo content for development environments.
"""

from apexlms.infrastructure.database.seeds.demo import SAMPLE_QUIZ_ID, seed_demo_content

__all__ = ["SAMPLE_QUIZ_ID", "seed_demo_content"]
