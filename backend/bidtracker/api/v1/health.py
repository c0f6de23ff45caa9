"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from bidtracker.dependencies import get_db, get_fetch_pipeline
from bidtracker.schemas import HealthCheckResponse
from bidtracker.scrapers.pipeline import FetchPipeline

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    pipeline: FetchPipeline = Depends(get_fetch_pipeline),
):
    """Return service health status.

    Checks database connectivity and lists the registered adapters.
    """
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    services = {"database": db_status}

    return HealthCheckResponse(
        status="ok" if db_status == "ok" else "degraded",
        database=db_status,
        adapters=pipeline.registry.get_registered_slugs(),
        services=services,
    )
