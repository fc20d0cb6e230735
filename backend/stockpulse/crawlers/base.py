"""Base crawler adapter interface.

All platform-specific crawlers inherit from BaseCrawler and implement
build_url() and parse(). The shared fetch_page() never raises for an
ordinary HTTP or parse failure: it returns a failed PageResult instead.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

import httpx
import structlog

from stockpulse.core.exceptions import SourceUnavailableError


ANONYMOUS_NICKNAME = "匿名"


class Platform(str, Enum):
    """Forum platforms with a registered crawler."""

    EASTMONEY = "eastmoney"  # 东方财富股吧
    XUEQIU = "xueqiu"  # 雪球


def make_post_id(platform: str, native_id: Any) -> str:
    """Build the canonical post id from the platform tag and its native id."""
    return f"{platform}_{native_id}"


@dataclass(frozen=True)
class Author:
    """Post author as reported by the source platform."""

    id: str = ""
    nickname: str = ANONYMOUS_NICKNAME


@dataclass
class CanonicalPost:
    """Normalized forum post returned by every platform normalizer."""

    id: str  # "{source}_{native id}", stable across refetches
    title: str
    author: Author
    stock_code: str
    publish_time: datetime  # timezone-aware, UTC
    source: str
    created_at: datetime
    content: Optional[str] = None
    click_count: int = 0
    comment_count: int = 0
    raw_data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.id:
            raise ValueError("id is required")
        if not self.source:
            raise ValueError("source is required")
        if self.click_count < 0 or self.comment_count < 0:
            raise ValueError("counts must be non-negative")
        if self.publish_time.tzinfo is None:
            raise ValueError("publish_time must be timezone-aware")

    @property
    def native_id(self) -> str:
        prefix = f"{self.source}_"
        return self.id[len(prefix):] if self.id.startswith(prefix) else self.id


@dataclass
class PageResult:
    """Outcome of fetching one listing page.

    Either carries the raw records of the page or a soft-failure reason.
    """

    page: int
    records: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, page: int, records: List[Dict[str, Any]]) -> "PageResult":
        return cls(page=page, records=list(records))

    @classmethod
    def failure(cls, page: int, reason: str) -> "PageResult":
        return cls(page=page, records=[], error=reason)


@dataclass(frozen=True)
class CrawlerConfig:
    """Static per-adapter request configuration, fixed at construction."""

    headers: Mapping[str, str] = field(default_factory=dict)
    cookie: str = ""
    timeout: float = 20.0
    transport: Optional[httpx.AsyncBaseTransport] = None


class BaseCrawler(ABC):
    """Abstract base class for all forum crawlers.

    Subclasses declare ``platform``, ``delay`` (milliseconds to wait between
    pages) and default request headers, and implement build_url() and parse().
    Instances hold no per-run state and may be shared by concurrent crawls.
    """

    platform: Platform
    delay: int = 1000
    default_headers: Mapping[str, str] = {}

    def __init__(self, config: Optional[CrawlerConfig] = None):
        self.config = config or CrawlerConfig()
        headers = {**self.default_headers, **self.config.headers}
        if self.config.cookie:
            headers["cookie"] = self.config.cookie
        self._headers = headers
        self.logger = structlog.get_logger(__name__).bind(platform=self.platform.value)

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._headers)

    @abstractmethod
    def build_url(self, stock_code: str, page: int) -> str:
        """Return the listing URL for one page of a stock's forum."""

    @abstractmethod
    def parse(self, body: str, page: int) -> PageResult:
        """Turn a response body into raw records or a soft failure."""

    async def fetch_page(self, stock_code: str, page: int) -> PageResult:
        """Fetch and parse one page.

        Returns:
            PageResult with the page's raw records, or a failed PageResult
            when the source is unavailable (HTTP error, anti-bot page,
            layout drift, undecodable body).
        """
        url = self.build_url(stock_code, page)
        self.logger.info("fetching_page", page=page, url=url)

        try:
            body = await self._get(url, page)
        except SourceUnavailableError as e:
            self.logger.error("page_unavailable", page=page, reason=e.reason)
            return PageResult.failure(page, e.reason)
        except httpx.HTTPError as e:
            self.logger.error("page_request_failed", page=page, error=str(e))
            return PageResult.failure(page, f"request failed: {e.__class__.__name__}")

        result = self.parse(body, page)
        if result.ok:
            self.logger.info("page_parsed", page=page, count=len(result.records))
        else:
            self.logger.warning("page_parse_failed", page=page, reason=result.error)
        return result

    async def health_check(self, stock_code: str) -> bool:
        """Check if this crawler can read page 1 of a known forum."""
        result = await self.fetch_page(stock_code, 1)
        return result.ok

    async def _get(self, url: str, page: int) -> str:
        """GET a URL once and return its text body.

        Failed pages are not retried within a crawl; the caller re-issues the crawl.

        Raises:
            SourceUnavailableError: If the server answers with a non-2xx status
            httpx.TimeoutException: If the request times out
            httpx.NetworkError: If the connection fails
        """
        async with httpx.AsyncClient(
            timeout=self.config.timeout,
            headers=self._headers,
            transport=self.config.transport,
            follow_redirects=True,
        ) as client:
            response = await client.get(url)

        if response.status_code == 429:
            self.logger.warning("rate_limit_hit", page=page)
        if not response.is_success:
            raise SourceUnavailableError(
                self.platform.value,
                page,
                f"HTTP {response.status_code} {response.reason_phrase}".strip(),
            )
        return response.text
