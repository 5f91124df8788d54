"""Health check endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from cashcrash.api.dependencies import get_storage
from cashcrash.core.config import settings
from cashcrash.core.logging import get_logger
from cashcrash.database.connection import get_session
from cashcrash.repositories import Storage
from cashcrash.schemas.common import HealthResponse


router = APIRouter(prefix="/health")

logger = get_logger("health")


async def db_healthcheck() -> bool:
    """Check PostgreSQL database health."""
    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError, RuntimeError) as e:
        logger.warning(f"Database healthcheck failed: {e}")
        return False


async def storage_healthcheck(storage: Storage) -> bool:
    try:
        await storage.list_companies()
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Storage healthcheck failed: {e}")
        return False


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health status of the API and its storage backend.",
)
async def health_check(storage: Storage = Depends(get_storage)) -> HealthResponse:
    checks = {"storage": await storage_healthcheck(storage)}
    if settings.has_database:
        checks["database"] = await db_healthcheck()

    # Memory storage keeps working without the settings database
    status = "healthy" if all(checks.values()) else "degraded"

    return HealthResponse(
        status=status,
        version=settings.app_version,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )
