"""Health check and Prometheus metrics endpoints.

/health probes the database the blog content lives in, measures probe
latency, and reports aggregate status.
"""

import asyncio
import time

import structlog
from fastapi import APIRouter, Depends
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.responses import Response

from src.api.dependencies import get_session_factory
from src.models.responses import DependencyHealth, HealthResponse

router = APIRouter(tags=["observability"])
logger: structlog.stdlib.BoundLogger = structlog.get_logger()

_APP_VERSION = "0.1.0"
_PROBE_TIMEOUT_SECONDS = 3.0
_start_time: float = time.time()


# ---------------------------------------------------------------------------
# Dependency probes
# ---------------------------------------------------------------------------


async def _probe_database(session_factory: async_sessionmaker[AsyncSession]) -> DependencyHealth:
    """Run SELECT 1 through the application's own session factory."""
    start = time.perf_counter()
    try:
        async with session_factory() as session:
            await asyncio.wait_for(session.execute(text("SELECT 1")), timeout=_PROBE_TIMEOUT_SECONDS)
        latency = (time.perf_counter() - start) * 1000
        return DependencyHealth(name="database", status="healthy", latency_ms=round(latency, 2))
    except Exception as exc:
        latency = (time.perf_counter() - start) * 1000
        logger.warning("database_probe_failed", error=str(exc)[:200])
        return DependencyHealth(
            name="database",
            status="unhealthy",
            latency_ms=round(latency, 2),
            details=str(exc)[:200],
        )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse)
async def health_check(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> HealthResponse:
    """Check API and database health."""
    dependencies = [await _probe_database(session_factory)]

    status = "healthy" if all(d.status == "healthy" for d in dependencies) else "unhealthy"

    return HealthResponse(
        status=status,
        version=_APP_VERSION,
        uptime_seconds=round(time.time() - _start_time, 2),
        dependencies=dependencies,
    )


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics for scraping."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
