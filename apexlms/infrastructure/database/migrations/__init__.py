# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Schema migrations for the learning database."""

from apexlms.infrastructure.database.migrations.runner import (
    MigrationError,
    Revision,
    discover_revisions,
    get_migration_status,
    plan_migrations,
    run_migrations,
)

__all__ = [
    "MigrationError",
    "Revision",
    "discover_revisions",
    "get_migration_status",
    "plan_migrations",
    "run_migrations",
]
