"""Register all crawlers with the process-wide registry.

Imported during application startup (FastAPI lifespan, CLI). Credentials
and headers come from settings and are fixed for the life of the process.
"""

from typing import Optional

import structlog

from stockpulse.config import Settings, settings as default_settings
from stockpulse.crawlers.adapters import EastmoneyCrawler, XueqiuCrawler
from stockpulse.crawlers.base import CrawlerConfig
from stockpulse.crawlers.factory import CrawlerRegistry, get_crawler_registry

logger = structlog.get_logger(__name__)


def build_config(cookie: str, settings: Settings) -> CrawlerConfig:
    return CrawlerConfig(
        headers={"user-agent": settings.USER_AGENT},
        cookie=cookie,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


def register_all_crawlers(
    registry: Optional[CrawlerRegistry] = None,
    settings: Optional[Settings] = None,
) -> CrawlerRegistry:
    """Build every crawler from settings and register it.

    Returns:
        The registry the crawlers were added to
    """
    registry = registry or get_crawler_registry()
    settings = settings or default_settings

    crawlers = [
        EastmoneyCrawler(build_config(settings.EASTMONEY_COOKIE, settings)),
        XueqiuCrawler(build_config(settings.XUEQIU_COOKIE, settings)),
    ]

    for crawler in crawlers:
        if not crawler.config.cookie:
            logger.warning("crawler_cookie_missing", platform=crawler.platform.value)
        registry.register(crawler.platform, crawler)

    logger.info(
        "all_crawlers_registered",
        count=len(registry.list_supported()),
        platforms=sorted(registry.list_supported()),
    )
    return registry
