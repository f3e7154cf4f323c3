"""Liveness, readiness and version probes. Exempt from rate limiting."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.config import get_settings
from loomero.database import get_session
from loomero.redis_client import redis_status

router = APIRouter()

_HEALTHY_CHECKS = ("ok", "disabled")


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Database must answer; Redis may be absent but not broken."""
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as exc:
        database = f"error: {exc}"

    checks = {"database": database, "redis": await redis_status()}
    ready = all(value in _HEALTHY_CHECKS for value in checks.values())
    return {"status": "ready" if ready else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {"version": settings.app_version, "environment": settings.environment}
