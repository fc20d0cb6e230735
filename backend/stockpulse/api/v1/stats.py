"""Aggregate statistics endpoint."""

from fastapi import APIRouter, Depends

from stockpulse.dependencies import get_crawl_service
from stockpulse.schemas import ApiResponse, StatsResponse
from stockpulse.services.crawl_service import CrawlService

router = APIRouter()


@router.get("", response_model=ApiResponse[StatsResponse])
async def get_stats(service: CrawlService = Depends(get_crawl_service)):
    """Total posts, posts per platform and the busiest stock codes."""
    stats = await service.get_stats()
    return ApiResponse(
        data=StatsResponse(
            total_posts=stats.total_posts,
            by_platform=stats.by_platform,
            by_stock=stats.by_stock,
        )
    )
