"""Crawl orchestration service.

Connects the crawler layer with the post store: resolve the platform,
run the driver over the requested pages, upsert the normalized posts.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from stockpulse.config import settings
from stockpulse.core.exceptions import InvalidRequestError, validation_message
from stockpulse.crawlers.base import CanonicalPost, Platform
from stockpulse.crawlers.driver import CrawlDriver
from stockpulse.crawlers.factory import CrawlerRegistry, get_crawler_registry
from stockpulse.schemas.post import CrawlRequest
from stockpulse.services.post_service import DEFAULT_QUERY_LIMIT, PostStats, PostStore

logger = structlog.get_logger(__name__)


@dataclass
class CrawlOutcome:
    """What the caller of a crawl gets back."""

    count: int
    platform: str
    message: str
    failed_pages: List[int] = field(default_factory=list)


class CrawlService:
    """Service for triggering crawls and reading stored posts.

    This is the inbound boundary used by the HTTP API and the CLI.
    """

    def __init__(
        self,
        db: AsyncSession,
        registry: Optional[CrawlerRegistry] = None,
        driver: Optional[CrawlDriver] = None,
        max_pages: Optional[int] = None,
    ):
        """Initialize crawl service.

        Args:
            db: Async database session
            registry: Crawler registry (defaults to the process-wide one)
            driver: Crawl driver (defaults to one pacing with asyncio.sleep)
            max_pages: Largest page span accepted per crawl
        """
        self.store = PostStore(db)
        self.registry = registry or get_crawler_registry()
        self.driver = driver or CrawlDriver()
        self.max_pages = max_pages or settings.CRAWL_MAX_PAGES
        self.logger = logger.bind(service="crawl_service")

    async def trigger_crawl(
        self,
        stock_code: str,
        platform: Union[Platform, str] = Platform.EASTMONEY,
        page_start: int = 1,
        page_end: int = 1,
    ) -> CrawlOutcome:
        """Crawl one stock's forum on one platform and persist the posts.

        Raises:
            InvalidRequestError: If input is missing or malformed
            UnsupportedPlatformError: If the platform is not registered
                (raised before any network activity)
            StorageError: If the posts cannot be persisted
        """
        platform_id = platform.value if isinstance(platform, Platform) else platform
        try:
            request = CrawlRequest(
                stock_code=stock_code or "",
                platform=platform_id or Platform.EASTMONEY.value,
                page_start=page_start,
                page_end=page_end,
            )
        except ValidationError as e:
            raise InvalidRequestError(validation_message(e.errors())) from e

        return await self.run(request)

    async def run(self, request: CrawlRequest) -> CrawlOutcome:
        """Run an already-validated crawl request."""
        if request.page_count > self.max_pages:
            raise InvalidRequestError(
                f"At most {self.max_pages} pages per crawl (got {request.page_count})"
            )

        crawler = self.registry.resolve(request.platform)

        self.logger.info(
            "running_crawl",
            platform=request.platform,
            stock_code=request.stock_code,
            page_start=request.page_start,
            page_end=request.page_end,
        )

        report = await self.driver.crawl(
            crawler, request.stock_code, request.page_start, request.page_end
        )

        count = 0
        if report.posts:
            count = await self.store.upsert_many(report.posts)

        outcome = CrawlOutcome(
            count=count,
            platform=request.platform,
            message=f"Crawled {count} posts",
            failed_pages=report.failed_pages,
        )
        self.logger.info(
            "crawl_complete",
            platform=outcome.platform,
            count=outcome.count,
            failed_pages=outcome.failed_pages,
        )
        return outcome

    async def list_posts(
        self,
        stock_code: Optional[str] = None,
        platform: Union[Platform, str, None] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> List[CanonicalPost]:
        """Query stored posts; an unknown platform filter is rejected."""
        if platform:
            platform = self.registry.resolve(platform).platform
        return await self.store.query(stock_code=stock_code, platform=platform, limit=limit)

    async def get_stats(self, top_stocks: Optional[int] = None) -> PostStats:
        return await self.store.get_stats(top_stocks=top_stocks or settings.STATS_TOP_STOCKS)
