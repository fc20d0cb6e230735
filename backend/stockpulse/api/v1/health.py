"""Health check and platform listing endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from stockpulse.crawlers.factory import CrawlerRegistry
from stockpulse.dependencies import get_db, get_registry
from stockpulse.schemas import ApiResponse, HealthCheckResponse

router = APIRouter()


@router.get("/platforms", response_model=ApiResponse[List[str]])
async def list_platforms(registry: CrawlerRegistry = Depends(get_registry)):
    """Platforms that can be crawled."""
    return ApiResponse(data=sorted(registry.list_supported()))


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    registry: CrawlerRegistry = Depends(get_registry),
):
    """Return service health status.

    Checks database connectivity and reports the registered platforms.
    """
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    platforms = sorted(registry.list_supported())
    services = {
        "database": db_status,
        "crawlers": "ok" if platforms else "error: none registered",
    }
    overall_status = "ok" if all(s == "ok" for s in services.values()) else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        database=db_status,
        platforms=platforms,
        services=services,
    )
