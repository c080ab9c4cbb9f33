# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz domain package.

This package provides quiz authoring, attempt start and submission history.
"""

from apexlms.domains.quiz.service import QuizService

__all__ = [
    "QuizService",
]
