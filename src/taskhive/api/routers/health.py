"""Health check endpoints."""

import time
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskhive import __version__
from taskhive.api.schemas.health import (
    ComponentHealth,
    HealthDetailResponse,
    HealthResponse,
    HealthStatus,
)
from taskhive.db.dependencies import get_db

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Returns basic liveness status. No authentication required.",
)
async def health_check() -> HealthResponse:
    """Liveness check; 200 whenever the process is serving."""
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        version=__version__,
        timestamp=datetime.now(UTC),
    )


@router.get(
    "/health/db",
    response_model=HealthDetailResponse,
    summary="Database health check",
    description="Checks database connectivity. No authentication required.",
    responses={503: {"model": HealthDetailResponse}},
)
async def health_db(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthDetailResponse | JSONResponse:
    """Database connectivity check with latency. 503 when unreachable."""
    db_health = await _check_database(db)

    response = HealthDetailResponse(
        status=db_health.status,
        version=__version__,
        timestamp=datetime.now(UTC),
        database=db_health,
    )
    if db_health.status != HealthStatus.HEALTHY:
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))
    return response


async def _check_database(db: AsyncSession) -> ComponentHealth:
    start = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"Database error: {type(e).__name__}",
        )
    latency_ms = (time.perf_counter() - start) * 1000
    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Connected",
        latency_ms=round(latency_ms, 2),
    )
