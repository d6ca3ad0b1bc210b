# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides liveness and readiness endpoints for the API.
"""

import logging
import time
from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel, Field

from chatplay.core.config import get_settings
from chatplay.infrastructure.database import check_database_connection
from chatplay.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    checked_at: datetime = Field(description="When health was checked")


class ReadinessResponse(BaseModel):
    """Readiness check response model."""
    ready: bool = Field(description="Whether the service is ready")
    database: bool = Field(description="Whether the database answered")


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Report that the process is up."""
    return HealthResponse(
        status="healthy",
        environment=get_settings().environment,
        uptime_seconds=int(time.time() - _server_start_time),
        checked_at=utc_now(),
    )


@router.get("/ready", response_model=ReadinessResponse)
async def ready() -> ReadinessResponse:
    """Report whether storage is reachable."""
    database = await check_database_connection()
    if not database:
        logger.warning("Readiness check failed: database unavailable")
    return ReadinessResponse(ready=database, database=database)
