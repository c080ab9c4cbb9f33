# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for persistence and messaging.

This package contains:
- Database connections (PostgreSQL via SQLAlchemy async)
- Storage backends (relational and in-memory learning stores)
- In-process event bus
"""
