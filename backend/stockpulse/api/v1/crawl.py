"""Crawl trigger endpoint."""

from fastapi import APIRouter, Depends

from stockpulse.dependencies import get_crawl_service
from stockpulse.schemas import ApiResponse, CrawlRequest, CrawlResponse
from stockpulse.services.crawl_service import CrawlService

router = APIRouter()


@router.post("", response_model=ApiResponse[CrawlResponse])
async def trigger_crawl(
    request: CrawlRequest,
    service: CrawlService = Depends(get_crawl_service),
):
    """Crawl a page range of one stock's forum and store the posts.

    Pages that fail (HTTP error, anti-bot page, layout drift) are skipped
    and listed in ``failed_pages``; the crawl itself still succeeds.
    Re-crawling the same range is safe: posts are upserted by id.
    """
    outcome = await service.run(request)
    return ApiResponse(
        data=CrawlResponse(
            count=outcome.count,
            platform=outcome.platform,
            message=outcome.message,
            failed_pages=outcome.failed_pages,
        )
    )
