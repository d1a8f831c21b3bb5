"""
Notebox — Health Check Route
==============================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   A service that cannot reach its database cannot serve a single note,
       so "healthy" means the database answers.
How:   Runs SELECT 1 through the app's Database and reports the outcome.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   Database reachable
    - unhealthy: Database unreachable
"""

import logging
import time

from fastapi import APIRouter, Request

from notebox import __version__
from notebox.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level: initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the health status of the service and its database.",
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
        uptime_seconds=round(time.time() - _start_time, 2),
    )
