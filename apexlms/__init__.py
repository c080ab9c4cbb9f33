"""Apex LMS learning core.

Course delivery backend providing quiz grading, lesson progress tracking,
sequential lesson gating and real-time presence for learners.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
