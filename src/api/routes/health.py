# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Liveness and readiness endpoints.

- GET /health - Status of the record store and the curriculum reference
- GET /ready - Whether the engine can serve requests
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from src import __version__
from src.core.config import get_settings
from src.domains.curriculum.reference import get_curriculum_reference
from src.infrastructure.database.connection import check_database_connection

logger = logging.getLogger(__name__)

router = APIRouter()

_started_at = time.monotonic()


class ComponentStatus(BaseModel):
    """Status of one engine dependency."""

    healthy: bool
    latency_ms: float | None = None
    detail: str | None = None


class HealthResponse(BaseModel):
    """Engine health report."""

    status: str = Field(description="healthy or degraded")
    version: str
    environment: str
    uptime_seconds: int
    checked_at: datetime
    components: dict[str, ComponentStatus]


async def _record_store_status() -> ComponentStatus:
    started = time.perf_counter()
    healthy = await check_database_connection()
    latency = round((time.perf_counter() - started) * 1000, 2)
    if not healthy:
        logger.error("Record store health check failed after %.2f ms", latency)
        return ComponentStatus(healthy=False, latency_ms=latency, detail="unreachable")
    return ComponentStatus(healthy=True, latency_ms=latency)


def _curriculum_status() -> ComponentStatus:
    units = get_curriculum_reference().total_units()
    return ComponentStatus(healthy=units > 0, detail=f"{units} units loaded")


async def _components() -> dict[str, ComponentStatus]:
    return {
        "record_store": await _record_store_status(),
        "curriculum": _curriculum_status(),
    }


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report the engine's dependencies; always answers 200."""
    components = await _components()
    healthy = all(c.healthy for c in components.values())

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=__version__,
        environment=get_settings().environment,
        uptime_seconds=int(time.monotonic() - _started_at),
        checked_at=datetime.now(timezone.utc),
        components=components,
    )


@router.get("/ready", response_model=dict[str, ComponentStatus])
async def readiness_check(response: Response) -> dict[str, ComponentStatus]:
    """503 until every dependency is healthy."""
    components = await _components()
    if not all(c.healthy for c in components.values()):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return components
