"""
MediRate Admin Backend — Health Check Route
=============================================

What:  Health check endpoint for monitoring and platform probes.
How:   Checks the database with SELECT 1 and reports whether the blob store
       token is configured. No external API is called.
Who:   Called by the hosting platform's health checks and uptime monitors.

Status levels:
    - healthy:   Database reachable and blob store configured
    - degraded:  Database reachable, blob store unconfigured
    - unhealthy: Database unreachable
    All three are returned with HTTP 200 and a JSON body.
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from medirate import __version__
from medirate.database import engine
from medirate.schemas.common import HealthResponse
from medirate.services.blob_service import blob_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    blob_status = "configured" if blob_service.is_configured else "unconfigured"
    if blob_status == "unconfigured" and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        blob_store=blob_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
