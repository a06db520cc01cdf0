"""Health check endpoints."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text

from aicgs.database import get_db_session
from aicgs.logging_config import get_logger
from aicgs.redis import get_redis
from aicgs.schemas import HealthCheckResponse, SystemStatusResponse

logger = get_logger(__name__)
router = APIRouter(tags=["monitoring"])


def _elapsed_ms(start: float) -> float:
    return round((time.monotonic() - start) * 1000, 1)


@router.get("/health")
async def health_check():
    """Liveness probe; touches no backing service."""
    return {"status": "ok", "service": "aicgs"}


@router.get("/api/health", response_model=SystemStatusResponse)
async def health_status():
    """Check DB + Redis health, return overall status with latency."""
    checks: dict[str, HealthCheckResponse] = {}

    db_start = time.monotonic()
    try:
        async with get_db_session() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = HealthCheckResponse(status="healthy", latency_ms=_elapsed_ms(db_start))
    except Exception as e:
        logger.error("health_check_db_failed", error=str(e))
        checks["database"] = HealthCheckResponse(status="unhealthy", latency_ms=_elapsed_ms(db_start))

    redis_start = time.monotonic()
    try:
        await get_redis().ping()
        checks["redis"] = HealthCheckResponse(status="healthy", latency_ms=_elapsed_ms(redis_start))
    except Exception as e:
        logger.error("health_check_redis_failed", error=str(e))
        checks["redis"] = HealthCheckResponse(status="unhealthy", latency_ms=_elapsed_ms(redis_start))

    statuses = [c.status for c in checks.values()]
    if all(s == "unhealthy" for s in statuses):
        overall = "unhealthy"
    elif any(s == "unhealthy" for s in statuses):
        overall = "degraded"
    else:
        overall = "healthy"

    return SystemStatusResponse(
        status=overall,
        checks=checks,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
