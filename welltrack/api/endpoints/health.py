"""Health check endpoints."""

from datetime import datetime

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from welltrack.config import settings
from welltrack.database import check_database_connection
from welltrack.tasks import WEEKLY_DIGEST

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    database: str
    scheduler: str
    next_digest_run: datetime | None = None


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check including the database and scheduler",
)
async def detailed_health_check(request: Request) -> DetailedHealthResponse:
    """
    Detailed health check.

    ``status`` is ``degraded`` when the database does not answer. The
    scheduler is ``stopped`` when the digest job is disabled or the
    application was started without its lifespan.
    """
    db_healthy = await check_database_connection()

    registry = getattr(request.app.state, "task_registry", None)
    running = registry is not None and registry.running

    return DetailedHealthResponse(
        status="ok" if db_healthy else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database="healthy" if db_healthy else "unhealthy",
        scheduler="running" if running else "stopped",
        next_digest_run=registry.next_run(WEEKLY_DIGEST) if running else None,
    )
