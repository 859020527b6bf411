"""
CloudMemo Backend - Health Check Route
========================================

What:  Health check endpoint for monitoring and container probes.
How:   Probes both stores and reports an aggregate status.
When:  Periodically (e.g., every 30 seconds by Docker).

Status levels:
    - healthy:   Relational store and key-value store both answer (HTTP 200)
    - unhealthy: Either store is down (HTTP 503). Both are critical: without
                 the key-value store nobody can even authenticate.
"""

import logging
import time

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text

from cloudmemo import __version__
from cloudmemo.schemas.common import HealthResponse
from cloudmemo.services.kv_base import KeyValueStore
from cloudmemo.services.kv_store import get_kv_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "A store is unreachable", "model": HealthResponse}},
)
async def health_check(
    response: Response,
    kv: KeyValueStore = Depends(get_kv_store),
) -> HealthResponse:
    """
    Check the health of the service and both stores.

    Check details:
        Database: SELECT 1 on a pooled connection
        Key-value store: ping()
    """
    db_status = "connected"
    kv_status = "connected"

    try:
        from cloudmemo.database import engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not await kv.ping():
        kv_status = "disconnected"
        logger.warning("Health check: key-value store unreachable")

    overall = "healthy"
    if db_status != "connected" or kv_status != "connected":
        overall = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        kv_store=kv_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
