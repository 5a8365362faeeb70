"""
Health Check Endpoints.

Endpoints:
- /health: Liveness check (process running)
- /health/ready: Readiness check (database reachable)
"""

from typing import Any

from fastapi import APIRouter, HTTPException
from sqlalchemy import text

from personal_notes.backend.core.logging import get_logger
from personal_notes.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)


async def check_database() -> dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict with status, latency, and optional error message
    """
    from personal_notes.backend.core.database import get_session_factory

    try:
        start = utc_now()
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
        latency_ms = int((utc_now() - start).total_seconds() * 1000)

        return {
            "status": "healthy",
            "latency_ms": latency_ms,
        }

    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {
            "status": "unhealthy",
            "error": str(e),
        }


@router.get("/health", summary="Liveness check")
async def health() -> dict[str, Any]:
    """Process is up."""
    return {"status": "healthy", "timestamp": utc_now().isoformat()}


@router.get("/health/ready", summary="Readiness check")
async def readiness() -> dict[str, Any]:
    """
    Dependencies are reachable.

    Raises:
        HTTPException 503: If the database check fails
    """
    database = await check_database()
    checks = {"database": database}

    if database["status"] != "healthy":
        raise HTTPException(
            status_code=503,
            detail={"status": "unhealthy", "checks": checks},
        )

    return {"status": "healthy", "checks": checks, "timestamp": utc_now().isoformat()}
