"""
Cocktail Catalog Backend: Health Check Route
==============================================

What:  GET /health for container health checks and load balancer probes.
How:   SELECT 1 against the store and a writability check of the image
       directories.

Status levels:
    healthy    store reachable, storage writable         (HTTP 200)
    degraded   store reachable, storage not writable     (HTTP 200)
    unhealthy  store unreachable                         (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cocktail_api import __version__
from cocktail_api.database import ping_database
from cocktail_api.dependencies import get_image_service
from cocktail_api.schemas.common import HealthResponse
from cocktail_api.services.image_service import ImageService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(images: ImageService = Depends(get_image_service)) -> JSONResponse:
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    try:
        await ping_database()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not images.is_writable():
        storage_status = "unwritable"
        if overall == "healthy":
            overall = "degraded"
        logger.warning("Health check: storage not writable at %s", images.storage_root)

    health = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(
        status_code=503 if overall == "unhealthy" else 200,
        content=health.model_dump(by_alias=True),
    )
