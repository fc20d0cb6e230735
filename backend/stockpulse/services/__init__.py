"""Business logic services for StockPulse."""

from stockpulse.services.crawl_service import CrawlOutcome, CrawlService
from stockpulse.services.post_service import PostStats, PostStore

__all__ = [
    "CrawlOutcome",
    "CrawlService",
    "PostStats",
    "PostStore",
]
