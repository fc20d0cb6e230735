"""Pydantic schemas for crawl requests, stored posts and stats."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from stockpulse.crawlers.base import CanonicalPost, Platform


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CrawlRequest(BaseModel):
    """Payload for POST /api/v1/crawl."""

    stock_code: str = Field(
        ...,
        description="Ticker / forum code, e.g. '002085'",
        examples=["002085"],
    )
    platform: str = Field(
        Platform.EASTMONEY.value,
        description="Platform identifier, e.g. 'eastmoney' or 'xueqiu'",
        examples=["eastmoney"],
    )
    page_start: int = Field(1, ge=1, description="First page to crawl (1-based)")
    page_end: int = Field(1, ge=1, description="Last page to crawl, inclusive")

    @field_validator("stock_code")
    @classmethod
    def strip_stock_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("stock_code must not be empty")
        return v

    @field_validator("platform")
    @classmethod
    def lower_platform(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="after")
    def page_range_ordered(self) -> "CrawlRequest":
        if self.page_start > self.page_end:
            raise ValueError(
                f"page_start ({self.page_start}) must not exceed page_end ({self.page_end})"
            )
        return self

    @property
    def page_count(self) -> int:
        return self.page_end - self.page_start + 1


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CrawlResponse(BaseModel):
    """Result of a triggered crawl."""

    count: int = Field(..., description="Posts normalized and stored")
    platform: str
    message: str
    failed_pages: List[int] = Field(
        default_factory=list,
        description="Pages that returned nothing because the source was unavailable",
    )


class AuthorSchema(BaseModel):
    id: str
    nickname: str


class PostResponse(BaseModel):
    """A stored canonical post."""

    id: str
    title: str
    content: Optional[str] = None
    author: AuthorSchema
    stock_code: str
    publish_time: datetime
    click_count: int
    comment_count: int
    source: str
    raw_data: Dict[str, Any] = {}
    created_at: datetime

    @classmethod
    def from_post(cls, post: CanonicalPost) -> "PostResponse":
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            author=AuthorSchema(id=post.author.id, nickname=post.author.nickname),
            stock_code=post.stock_code,
            publish_time=post.publish_time,
            click_count=post.click_count,
            comment_count=post.comment_count,
            source=post.source,
            raw_data=post.raw_data,
            created_at=post.created_at,
        )


class StatsResponse(BaseModel):
    """Aggregate post counts."""

    total_posts: int
    by_platform: Dict[str, int]
    by_stock: Dict[str, int]
