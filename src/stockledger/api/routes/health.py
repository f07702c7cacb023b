"""
Health check endpoints.
"""

import time

import aiosqlite
from fastapi import APIRouter

from stockledger.application.dto.responses import ComponentHealth, HealthResponse
from stockledger.config import get_settings
from stockledger.infrastructure.storage.sqlite import get_pool
from stockledger.infrastructure.storage.sqlite.migrations import get_current_version

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check.

    Returns service status and uptime.
    """
    return HealthResponse(
        status="healthy",
        version=get_settings().app_version,
        uptime_seconds=time.time() - _start_time,
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Database health check.

    Runs a trivial query and reports the applied schema version.
    """
    schema_version = None
    try:
        pool = await get_pool()
        start = time.perf_counter()
        async with pool.acquire() as conn:
            await conn.execute("SELECT 1")
            schema_version = await get_current_version(conn)
        latency_ms = (time.perf_counter() - start) * 1000
        db_status = ComponentHealth(status="up", detail=f"{latency_ms:.1f}ms")
    except (aiosqlite.Error, OSError) as e:
        db_status = ComponentHealth(status="down", detail=str(e))

    return HealthResponse(
        status="healthy" if db_status.status == "up" else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=time.time() - _start_time,
        database=db_status,
        schema_version=schema_version,
    )
