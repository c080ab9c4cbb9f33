# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics domain package.

This package provides the admin dashboard counts.
"""

from apexlms.domains.analytics.service import AnalyticsService

__all__ = [
    "AnalyticsService",
]
