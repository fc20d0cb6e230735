"""Stored posts query endpoint."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from stockpulse.dependencies import get_crawl_service
from stockpulse.schemas import ApiResponse, PostResponse, ResponseMeta
from stockpulse.services.crawl_service import CrawlService

router = APIRouter()


@router.get("", response_model=ApiResponse[List[PostResponse]])
async def list_posts(
    stock_code: Optional[str] = Query(None, description="Filter by stock code"),
    platform: Optional[str] = Query(None, description="Filter by platform"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum posts to return"),
    service: CrawlService = Depends(get_crawl_service),
):
    """List stored posts, newest publish time first."""
    posts = await service.list_posts(stock_code=stock_code, platform=platform, limit=limit)
    return ApiResponse(
        data=[PostResponse.from_post(p) for p in posts],
        meta=ResponseMeta(count=len(posts), limit=limit),
    )
