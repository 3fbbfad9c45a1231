# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

/health reports component status; /ready answers whether the service can
take traffic (the database must be reachable, Redis is optional).
"""

import logging
import time
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field
from sqlalchemy import text

from collegehub import __version__
from collegehub.core.config import get_settings
from collegehub.infrastructure.cache import RedisError, get_redis
from collegehub.infrastructure.database import DatabaseError, get_engine
from collegehub.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""

    status: str = Field(description="Component status")
    latency_ms: float | None = Field(None, description="Response latency in ms")
    message: str | None = Field(None, description="Additional status message")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall health status")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    checked_at: datetime = Field(description="When health was checked")
    components: dict[str, ComponentHealth] = Field(default_factory=dict)


class ReadinessResponse(BaseModel):
    ready: bool = Field(description="Whether the service is ready")
    checks: dict[str, Any] = Field(description="Individual check results")


async def check_database() -> ComponentHealth:
    """Check PostgreSQL database connection."""
    try:
        engine = get_engine()
        start = time.time()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        latency = (time.time() - start) * 1000
        return ComponentHealth(status="healthy", latency_ms=round(latency, 2))
    except DatabaseError as e:
        return ComponentHealth(status="unhealthy", message=e.message)
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        return ComponentHealth(status="unhealthy", message=str(e))


async def check_redis() -> ComponentHealth:
    """Check Redis connection."""
    try:
        client = get_redis()
    except RedisError:
        return ComponentHealth(status="disabled", message="Redis not initialised")

    start = time.time()
    healthy = await client.health_check()
    latency = (time.time() - start) * 1000
    if not healthy:
        return ComponentHealth(status="unhealthy", message="PING failed")
    return ComponentHealth(status="healthy", latency_ms=round(latency, 2))


@router.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    return {"name": "collegehub", "version": __version__}


@router.get("/health", response_model=HealthResponse, summary="Service health")
async def health() -> HealthResponse:
    settings = get_settings()
    components = {
        "database": await check_database(),
        "redis": await check_redis(),
    }
    overall = "healthy"
    if components["database"].status != "healthy":
        overall = "unhealthy"
    elif components["redis"].status == "unhealthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        environment=settings.environment,
        uptime_seconds=int(time.time() - _server_start_time),
        checked_at=utc_now(),
        components=components,
    )


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness probe")
async def ready(response: Response) -> ReadinessResponse:
    database = await check_database()
    redis = await check_redis()
    is_ready = database.status == "healthy"
    if not is_ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(
        ready=is_ready,
        checks={
            "database": database.model_dump(exclude_none=True),
            "redis": redis.model_dump(exclude_none=True),
        },
    )
