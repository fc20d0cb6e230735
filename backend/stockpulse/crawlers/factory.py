"""Registry resolving a platform identifier to its crawler instance."""

from typing import Dict, FrozenSet, Union

import structlog

from stockpulse.core.exceptions import UnsupportedPlatformError
from stockpulse.crawlers.base import BaseCrawler, Platform


logger = structlog.get_logger(__name__)


def _platform_key(platform: Union[Platform, str]) -> str:
    return platform.value if isinstance(platform, Platform) else str(platform).strip().lower()


class CrawlerRegistry:
    """Single source of truth for the supported platforms.

    Crawlers are registered once at startup (see register_crawlers) and
    shared by every crawl run; they are stateless apart from their
    read-only request configuration.
    """

    def __init__(self):
        self._crawlers: Dict[str, BaseCrawler] = {}

    def register(self, platform: Union[Platform, str], crawler: BaseCrawler) -> None:
        """Register a crawler instance for a platform.

        Args:
            platform: Platform identifier (e.g., "eastmoney")
            crawler: Crawler instance (must inherit from BaseCrawler)
        """
        if not isinstance(crawler, BaseCrawler):
            raise ValueError(f"Crawler must inherit from BaseCrawler: {crawler!r}")

        key = _platform_key(platform)
        self._crawlers[key] = crawler
        logger.info("crawler_registered", platform=key, crawler=type(crawler).__name__)

    def resolve(self, platform: Union[Platform, str]) -> BaseCrawler:
        """Return the crawler for a platform.

        Raises:
            UnsupportedPlatformError: If the platform is not registered
        """
        key = _platform_key(platform)
        crawler = self._crawlers.get(key)
        if crawler is None:
            logger.warning("crawler_not_found", platform=key)
            raise UnsupportedPlatformError(key, self._crawlers.keys())
        return crawler

    def list_supported(self) -> FrozenSet[str]:
        return frozenset(self._crawlers)

    def is_supported(self, platform: Union[Platform, str]) -> bool:
        return _platform_key(platform) in self._crawlers

    def clear(self) -> None:
        self._crawlers.clear()


# Global registry instance
crawler_registry = CrawlerRegistry()


def get_crawler_registry() -> CrawlerRegistry:
    """Get the global crawler registry instance."""
    return crawler_registry
