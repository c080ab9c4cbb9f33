# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides health and readiness endpoints for the API.
"""

import logging
import time
from datetime import datetime
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

import apexlms
from apexlms.api.dependencies import current_learning_store
from apexlms.api.v1.presence import get_presence_hub
from apexlms.core.config import get_settings
from apexlms.infrastructure.database import DatabaseError
from apexlms.infrastructure.database.migrations import MigrationError, get_migration_status
from apexlms.infrastructure.events import get_event_bus
from apexlms.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""
    status: str = Field(description="Component status")
    latency_ms: float | None = Field(None, description="Response latency in ms")
    message: str | None = Field(None, description="Additional status message")


class ComponentsHealth(BaseModel):
    """All components health status."""
    storage: ComponentHealth | None = None
    events: dict[str, Any] = Field(default_factory=dict)
    presence_connections: int = 0


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(description="Current server timestamp")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    storage_backend: str = Field(description="Learning store backend")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    components: ComponentsHealth = Field(default_factory=ComponentsHealth)


class ReadinessResponse(BaseModel):
    """Readiness check response model."""
    ready: bool = Field(description="Whether the service is ready")
    checks: dict[str, Any] = Field(description="Individual check results")


async def check_storage() -> ComponentHealth:
    """Check that the learning store is initialized and reachable."""
    store = current_learning_store()
    if store is None:
        return ComponentHealth(status="unhealthy", message="Learning store not initialized")

    start = time.time()
    reachable = await store.ping()
    latency = (time.time() - start) * 1000

    if not reachable:
        logger.error("Learning store health check failed")
        return ComponentHealth(status="unhealthy", message="Learning store unreachable")
    return ComponentHealth(status="healthy", latency_ms=round(latency, 2))


async def check_migrations() -> dict[str, Any]:
    """Check that the database schema is at the latest revision."""
    try:
        status = await get_migration_status()
    except (DatabaseError, MigrationError, SQLAlchemyError) as e:
        logger.error("Migration status check failed: %s", e)
        return {"status": "unhealthy", "message": str(e)}

    return {
        "status": "healthy" if status["is_up_to_date"] else "unhealthy",
        "current_version": status["current_version"],
        "pending_migrations": status["pending_migrations"],
    }


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check if the API is healthy with component details.

    Returns:
        HealthResponse with detailed status.
    """
    settings = get_settings()
    storage_health = await check_storage()

    return HealthResponse(
        status="healthy" if storage_health.status == "healthy" else "unhealthy",
        timestamp=utc_now(),
        version=apexlms.__version__,
        environment=settings.environment,
        storage_backend=settings.storage.backend,
        uptime_seconds=int(time.time() - _server_start_time),
        components=ComponentsHealth(
            storage=storage_health,
            events=get_event_bus().get_stats(),
            presence_connections=get_presence_hub().connection_count,
        ),
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Check if the API is ready to accept traffic.

    Returns:
        ReadinessResponse with individual check results.
    """
    storage_health = await check_storage()
    checks: dict[str, Any] = {
        "storage": {
            "status": storage_health.status,
            "latency_ms": storage_health.latency_ms,
        },
    }
    if get_settings().storage.backend == "postgres" and storage_health.status == "healthy":
        checks["migrations"] = await check_migrations()

    ready = all(check["status"] == "healthy" for check in checks.values())
    return ReadinessResponse(ready=ready, checks=checks)
