"""Pydantic schemas for the StockPulse API.

All request/response models are defined here for easy import.
"""

from stockpulse.schemas.common import ApiResponse, ErrorDetail, ErrorResponse, ResponseMeta
from stockpulse.schemas.health import HealthCheckResponse
from stockpulse.schemas.post import (
    AuthorSchema,
    CrawlRequest,
    CrawlResponse,
    PostResponse,
    StatsResponse,
)

__all__ = [
    # Common
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    "ResponseMeta",
    # Health
    "HealthCheckResponse",
    # Posts
    "AuthorSchema",
    "CrawlRequest",
    "CrawlResponse",
    "PostResponse",
    "StatsResponse",
]
