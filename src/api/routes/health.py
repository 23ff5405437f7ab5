# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides the liveness endpoint with a database probe.
"""

import logging
import time
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from src.infrastructure.database.connection import check_database_connection
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "1.0.0"

# Track server start time for uptime calculation
_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""
    status: str = Field(description="Component status")
    latency_ms: float | None = Field(None, description="Response latency in ms")


class ComponentsHealth(BaseModel):
    """All components health status."""
    database: ComponentHealth
    narrative: str = Field(description="Narrative generator in use")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    checked_at: datetime = Field(description="When health was checked")
    components: ComponentsHealth


async def check_database() -> ComponentHealth:
    """Check the wellbeing database connection."""
    start = time.time()
    healthy = await check_database_connection()
    latency = (time.time() - start) * 1000

    if not healthy:
        logger.error("Database health check failed")
        return ComponentHealth(status="unhealthy")
    return ComponentHealth(status="healthy", latency_ms=round(latency, 2))


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Check if the API is healthy.

    The API reports "degraded" when the database is unreachable: the
    process is alive but check-ins cannot be stored.

    Returns:
        HealthResponse with component status.
    """
    settings = request.app.state.settings
    db_health = await check_database()

    return HealthResponse(
        status="healthy" if db_health.status == "healthy" else "degraded",
        version=API_VERSION,
        environment=settings.environment,
        uptime_seconds=int(time.time() - _server_start_time),
        checked_at=utc_now(),
        components=ComponentsHealth(
            database=db_health,
            narrative=type(request.app.state.narrative_generator).__name__,
        ),
    )
