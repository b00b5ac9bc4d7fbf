"""Liveness endpoints for load balancers and uptime monitors.

Endpoints (mounted at the root and again under /api):
    GET /health       -- Service status plus a MongoDB ping.
    GET /healthcheck  -- Same payload, kept for older monitors.

Both always answer 200. A failed or slow ping only turns the reported
status to "degraded", so the process stays in rotation while MongoDB
recovers.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from gamecatalog.config import settings
from gamecatalog.dal.database import get_database

logger = logging.getLogger("gamecatalog.routes.health")

router = APIRouter(tags=["Health"])


class HealthChecks(BaseModel):
    database: Literal["ok", "down"]


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded"]
    message: str
    version: str
    timestamp: datetime
    checks: HealthChecks


async def _database_status() -> Literal["ok", "down"]:
    """Ping MongoDB, giving up after the configured driver timeout."""
    try:
        db = get_database()
        await asyncio.wait_for(
            db.command("ping"),
            timeout=settings.MONGO_TIMEOUT_MS / 1000,
        )
    except Exception as e:
        logger.warning("Database health check failed: %s", e)
        return "down"
    return "ok"


@router.get("/health", response_model=HealthResponse, summary="Service health")
@router.get("/healthcheck", response_model=HealthResponse, include_in_schema=False)
async def health_check() -> HealthResponse:
    database = await _database_status()
    return HealthResponse(
        status="healthy" if database == "ok" else "degraded",
        message="Game Catalog API is running",
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc),
        checks=HealthChecks(database=database),
    )
