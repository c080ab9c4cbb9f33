# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course domain package.

This package provides the course listing, outline and authoring operations.
"""

from apexlms.domains.course.service import CourseService

__all__ = [
    "CourseService",
]
