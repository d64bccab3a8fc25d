# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

- GET /health - Overall status with the database probe
- GET /health/live - Process liveness, never touches the database
- GET /health/ready - 503 until the database answers
"""

import logging
import time
from datetime import datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src import __version__
from src.core.config import get_settings
from src.infrastructure.database.connection import check_database_connection
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

_started_at = time.monotonic()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(description="healthy or unhealthy")
    timestamp: datetime = Field(description="Current server time")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Seconds since the process started")
    database: str = Field(description="Database probe result")


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool = Field(description="Whether the service accepts traffic")
    database: str = Field(description="Database probe result")


async def _probe_database() -> str:
    if await check_database_connection():
        return "healthy"
    logger.warning("Database health probe failed")
    return "unhealthy"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report overall health."""
    database = await _probe_database()

    return HealthResponse(
        status=database,
        timestamp=utc_now(),
        version=__version__,
        environment=get_settings().environment,
        uptime_seconds=int(time.monotonic() - _started_at),
        database=database,
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse | JSONResponse:
    """Check if the API is ready to accept traffic."""
    database = await _probe_database()
    body = ReadinessResponse(ready=database == "healthy", database=database)

    if not body.ready:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=body.model_dump(),
        )
    return body
