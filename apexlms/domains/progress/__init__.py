# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Progress domain package.

This package records lesson completions and summarizes course progress.
"""

from apexlms.domains.progress.service import ProgressService

__all__ = [
    "ProgressService",
]
