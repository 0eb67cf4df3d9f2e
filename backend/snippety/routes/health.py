"""
Snippety — Health Check Route
===============================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Round-trips SELECT 1 through the app's engine.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from snippety import __version__
from snippety.database import ping
from snippety.schemas.snippet import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(request: Request):
    """Probe the database and report uptime."""
    try:
        await ping(request.app.state.engine)
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        body = HealthResponse(
            status="unhealthy",
            version=__version__,
            database="disconnected",
            uptime_seconds=round(time.time() - _start_time, 2),
            detail=type(e).__name__,
        )
        return JSONResponse(status_code=503, content=body.model_dump())

    return HealthResponse(
        status="healthy",
        version=__version__,
        database="connected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
