"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ecomm_recommender import __version__
from ecomm_recommender.config import get_settings
from ecomm_recommender.infrastructure.database.connection import get_session

logger = structlog.get_logger()

router = APIRouter()


class HealthResponse(BaseModel):
    """Service identity and configured backing store."""

    status: str
    service: str
    version: str
    environment: str
    timestamp: str
    dependencies: dict[str, Any]


class ReadinessResponse(BaseModel):
    """Per-dependency readiness."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Report that the process is up, without touching the database.

    Load balancers poll this; use /health/ready to check PostgreSQL.
    """
    settings = get_settings()

    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        version=__version__,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc).isoformat(),
        dependencies={
            "postgres": f"{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}"
        },
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(session: AsyncSession = Depends(get_session)) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Verifies that the database answers queries.
    This endpoint is used by Kubernetes readiness probes.
    """
    checks: dict[str, bool] = {}

    try:
        await session.execute(text("SELECT 1"))
        checks["postgres"] = True
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Readiness check failed", dependency="postgres", error=str(e))
        checks["postgres"] = False

    return ReadinessResponse(
        ready=all(checks.values()),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness check endpoint.

    Simple endpoint that returns 200 if the service is running.
    This endpoint is used by Kubernetes liveness probes.
    """
    return {"status": "alive"}
