"""
Blog Post API - Health Check Route
====================================

What:  Liveness/readiness probe for Docker and load balancers.
How:   Sends a `ping` command through the shared storage handle.

Status levels:
    - healthy:   MongoDB answers ping (HTTP 200)
    - unhealthy: MongoDB unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from blogpost import __version__
from blogpost.database import PostStorage, get_storage
from blogpost.routes.posts import get_post_service
from blogpost.schemas.post import HealthResponse
from blogpost.services.base import PostService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "MongoDB unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    storage: PostStorage = Depends(get_storage),
    service: PostService = Depends(get_post_service),
):
    """Pings MongoDB; answers 503 when the ping fails."""
    db_status = "connected"
    overall = "healthy"

    try:
        await storage.ping()
    except PyMongoError as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: MongoDB unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        id_strategy=service.id_strategy,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
