"""Crawler system for ingesting stock forum posts.

This package provides:
- Base crawler class, canonical post entity and page result type
- Platform adapters (Eastmoney Guba, Xueqiu)
- Normalizers mapping platform records onto CanonicalPost
- Registry resolving platform identifiers to crawler instances
- Driver running a crawler across a page range
"""

from .base import (
    ANONYMOUS_NICKNAME,
    Author,
    BaseCrawler,
    CanonicalPost,
    CrawlerConfig,
    PageResult,
    Platform,
    make_post_id,
)
from .driver import CrawlDriver, CrawlReport
from .factory import CrawlerRegistry, crawler_registry, get_crawler_registry
from .normalizer import normalize

__all__ = [
    # Base classes
    "BaseCrawler",
    "CrawlerConfig",
    "Platform",
    # Data structures
    "ANONYMOUS_NICKNAME",
    "Author",
    "CanonicalPost",
    "PageResult",
    "make_post_id",
    # Normalization
    "normalize",
    # Driver
    "CrawlDriver",
    "CrawlReport",
    # Registry
    "CrawlerRegistry",
    "crawler_registry",
    "get_crawler_registry",
]
