"""
Notes API - Health Check Route
==============================

What:  GET /health for container and load-balancer probes.
How:   Runs SELECT 1 through the application's Database. The service is
       "healthy" only when the database answers; the endpoint itself always
       returns 200 so probes can read the body.
"""

import logging
import time

from fastapi import APIRouter, Request

from notes_api import __version__
from notes_api.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - request.app.state.started_at, 2),
    )
