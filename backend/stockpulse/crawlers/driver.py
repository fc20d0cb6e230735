"""Paginated crawl driver.

Walks a page range one page at a time, paces requests with the crawler's
fixed delay, isolates per-page failures and normalizes the collected raw
records into CanonicalPosts.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List

import structlog

from stockpulse.core.exceptions import InvalidRequestError
from stockpulse.crawlers.base import BaseCrawler, CanonicalPost, PageResult
from stockpulse.crawlers.normalizer import normalize

logger = structlog.get_logger(__name__)


@dataclass
class CrawlReport:
    """Everything one crawl run produced, including per-page outcomes."""

    platform: str
    stock_code: str
    page_start: int
    page_end: int
    posts: List[CanonicalPost] = field(default_factory=list)
    pages: List[PageResult] = field(default_factory=list)
    skipped_records: int = 0

    @property
    def failed_pages(self) -> List[int]:
        return [p.page for p in self.pages if not p.ok]

    @property
    def succeeded_pages(self) -> List[int]:
        return [p.page for p in self.pages if p.ok]


class CrawlDriver:
    """Runs one crawler across a page range.

    Pages are fetched sequentially in increasing order. This is a
    rate-limit policy: do not parallelize without re-deriving each
    platform's tolerance. Both the fetch and the pacing delay are await
    points, so independent crawls can run concurrently on one event loop.
    """

    def __init__(self, sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        self._sleep = sleep

    async def run(
        self,
        crawler: BaseCrawler,
        stock_code: str,
        page_start: int,
        page_end: int,
    ) -> List[CanonicalPost]:
        """Crawl and return only the normalized posts."""
        report = await self.crawl(crawler, stock_code, page_start, page_end)
        return report.posts

    async def crawl(
        self,
        crawler: BaseCrawler,
        stock_code: str,
        page_start: int,
        page_end: int,
    ) -> CrawlReport:
        """Crawl pages page_start..page_end inclusive.

        A page that fails, softly or by raising, contributes zero records
        and is listed in ``CrawlReport.failed_pages``; the run goes on.

        Raises:
            InvalidRequestError: If the stock code is empty or bounds are invalid
        """
        stock_code = (stock_code or "").strip()
        if not stock_code:
            raise InvalidRequestError("stock_code is required")
        if page_start < 1 or page_end < 1:
            raise InvalidRequestError("Page numbers must be >= 1")
        if page_start > page_end:
            raise InvalidRequestError(
                f"page_start ({page_start}) must not exceed page_end ({page_end})"
            )

        platform = crawler.platform.value
        log = logger.bind(platform=platform, stock_code=stock_code)
        log.info("crawl_started", page_start=page_start, page_end=page_end)

        report = CrawlReport(
            platform=platform,
            stock_code=stock_code,
            page_start=page_start,
            page_end=page_end,
        )
        raw_records: List[Dict[str, Any]] = []

        for page in range(page_start, page_end + 1):
            try:
                result = await crawler.fetch_page(stock_code, page)
            except Exception as e:
                log.error("page_raised", page=page, error=str(e), exc_info=True)
                result = PageResult.failure(page, f"{e.__class__.__name__}: {e}")

            report.pages.append(result)
            if result.ok:
                raw_records.extend(result.records)
                log.info("page_fetched", page=page, count=len(result.records))
            else:
                log.warning("page_failed", page=page, reason=result.error)

            if page < page_end:
                await self._sleep(crawler.delay / 1000)

        now = datetime.now(timezone.utc)
        for raw in raw_records:
            try:
                report.posts.append(normalize(raw, platform, now=now))
            except (ValueError, TypeError, AttributeError) as e:
                report.skipped_records += 1
                log.warning("record_normalization_failed", error=str(e))

        log.info(
            "crawl_finished",
            count=len(report.posts),
            failed_pages=report.failed_pages,
            skipped_records=report.skipped_records,
        )
        return report
