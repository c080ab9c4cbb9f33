# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database migration runner.

Revisions are the modules of the ``schema`` package. Each module declares
``revision``, ``down_revision`` and an ``upgrade()`` function written with
alembic operations. The runner orders them by following the
``down_revision`` links from the base, so adding a revision only means
adding a module. Revisions are applied on the application engine, without
the alembic CLI, and the applied revision is tracked in the standard
alembic_version table.

Example:
    from apexlms.infrastructure.database.migrations import run_migrations

    await init_database(settings)
    applied = await run_migrations()
"""

import importlib
import logging
import pkgutil
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from apexlms.infrastructure.database.connection import get_engine

logger = logging.getLogger(__name__)

MIGRATIONS_PACKAGE = "apexlms.infrastructure.database.migrations.schema"


class MigrationError(Exception):
    """Raised when the revision modules do not form a single chain."""


@dataclass(frozen=True)
class Revision:
    """One schema revision module."""

    revision: str
    down_revision: str | None
    upgrade: Callable[[], None]


def discover_revisions(package: str = MIGRATIONS_PACKAGE) -> list[Revision]:
    """Load revision modules and order them from the base revision.

    Args:
        package: Dotted name of the package holding revision modules.

    Returns:
        Revisions in the order they must be applied.

    Raises:
        MigrationError: If a module is incomplete, two revisions share a
            parent, or a revision is not reachable from the base.
    """
    root = importlib.import_module(package)
    by_parent: dict[str | None, Revision] = {}

    for info in pkgutil.iter_modules(root.__path__):
        if info.ispkg:
            continue
        module = importlib.import_module(f"{package}.{info.name}")
        revision = getattr(module, "revision", None)
        upgrade = getattr(module, "upgrade", None)
        if not revision or not callable(upgrade):
            raise MigrationError(f"Migration {info.name} must define revision and upgrade()")

        down_revision = getattr(module, "down_revision", None)
        if down_revision in by_parent:
            raise MigrationError(
                f"Revisions {by_parent[down_revision].revision} and {revision} "
                f"both follow {down_revision or 'base'}"
            )
        by_parent[down_revision] = Revision(revision, down_revision, upgrade)

    ordered: list[Revision] = []
    parent: str | None = None
    while parent in by_parent:
        current = by_parent.pop(parent)
        ordered.append(current)
        parent = current.revision

    if by_parent:
        orphans = ", ".join(sorted(r.revision for r in by_parent.values()))
        raise MigrationError(f"Revisions not reachable from base: {orphans}")

    return ordered


def plan_migrations(
    revisions: list[Revision],
    current_version: str | None,
    target_revision: str | None = None,
) -> list[Revision]:
    """Select the revisions to apply.

    An unknown current version means the database is ahead of this code,
    so nothing is applied.

    Args:
        revisions: All revisions in apply order.
        current_version: Revision recorded in the database.
        target_revision: Stop after this revision. None means the latest.

    Returns:
        Revisions to apply, in order.
    """
    ids = [r.revision for r in revisions]

    if current_version is None:
        start = 0
    elif current_version in ids:
        start = ids.index(current_version) + 1
    else:
        logger.warning("Database revision %s is not a known migration", current_version)
        return []

    if target_revision is None:
        end = len(ids)
    elif target_revision in ids:
        end = ids.index(target_revision) + 1
    else:
        logger.warning("Target revision %s not found", target_revision)
        return []

    return revisions[start:end]


async def run_migrations(
    engine: AsyncEngine | None = None,
    target_revision: str | None = None,
) -> list[str]:
    """Apply pending revisions.

    Args:
        engine: Engine to migrate. Defaults to the application engine.
        target_revision: Stop after this revision. None means the latest.

    Returns:
        Applied revision ids.
    """
    engine = engine or get_engine()

    await _ensure_version_table(engine)
    current_version = await _current_version(engine)
    pending = plan_migrations(discover_revisions(), current_version, target_revision)

    if not pending:
        logger.info("Schema is at %s; no pending migrations", current_version or "base")
        return []

    for revision in pending:
        await _apply_revision(engine, revision)
        logger.info("Applied migration: %s", revision.revision)

    return [revision.revision for revision in pending]


async def get_migration_status(engine: AsyncEngine | None = None) -> dict[str, Any]:
    """Report the database revision against the known revisions.

    Args:
        engine: Engine to inspect. Defaults to the application engine.

    Returns:
        Dict with current and latest revision and the pending ones.
    """
    engine = engine or get_engine()
    revisions = discover_revisions()

    await _ensure_version_table(engine)
    current_version = await _current_version(engine)
    pending = [r.revision for r in plan_migrations(revisions, current_version)]

    return {
        "current_version": current_version,
        "latest_version": revisions[-1].revision if revisions else None,
        "pending_migrations": pending,
        "is_up_to_date": not pending,
    }


async def _ensure_version_table(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.execute(
            text("""
                CREATE TABLE IF NOT EXISTS alembic_version (
                    version_num VARCHAR(128) NOT NULL,
                    CONSTRAINT alembic_version_pkc PRIMARY KEY (version_num)
                )
            """)
        )


async def _current_version(engine: AsyncEngine) -> str | None:
    async with engine.connect() as conn:
        result = await conn.execute(text("SELECT version_num FROM alembic_version LIMIT 1"))
        return result.scalar_one_or_none()


async def _apply_revision(engine: AsyncEngine, revision: Revision) -> None:
    """Run one upgrade and record it in the same transaction."""
    async with engine.begin() as conn:
        await conn.run_sync(_upgrade_in_context, revision.upgrade)
        await conn.execute(text("DELETE FROM alembic_version"))
        await conn.execute(
            text("INSERT INTO alembic_version (version_num) VALUES (:version)"),
            {"version": revision.revision},
        )


def _upgrade_in_context(connection, upgrade: Callable[[], None]) -> None:
    # alembic's op proxy is sync and bound through Operations.context
    from alembic.operations import Operations
    from alembic.runtime.migration import MigrationContext

    context = MigrationContext.configure(connection)
    with Operations.context(context):
        upgrade()
