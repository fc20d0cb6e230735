"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from stockpulse.crawlers.base import (
    Author,
    BaseCrawler,
    CanonicalPost,
    PageResult,
    Platform,
    make_post_id,
)
from stockpulse.crawlers.factory import CrawlerRegistry
from stockpulse.models import Base


# ============================================================================
# FAKES
# ============================================================================

class FakeCrawler(BaseCrawler):
    """Crawler serving scripted pages without touching the network.

    ``pages`` maps a page number to a list of raw records, or to an
    exception instance that fetch_page() raises for that page.
    """

    delay = 0

    def __init__(
        self,
        pages: Optional[Dict[int, Union[List[Dict[str, Any]], Exception]]] = None,
        platform: Platform = Platform.EASTMONEY,
        delay: int = 0,
    ):
        self.platform = platform
        super().__init__()
        self.delay = delay
        self.pages = pages or {}
        self.calls: List[tuple] = []

    def build_url(self, stock_code: str, page: int) -> str:
        return f"https://example.test/{stock_code}/{page}"

    def parse(self, body: str, page: int) -> PageResult:
        return PageResult.success(page, [])

    async def fetch_page(self, stock_code: str, page: int) -> PageResult:
        self.calls.append((stock_code, page))
        outcome = self.pages.get(page, [])
        if isinstance(outcome, Exception):
            raise outcome
        return PageResult.success(page, outcome)


def eastmoney_record(post_id: int, **overrides) -> Dict[str, Any]:
    record = {
        "post_id": post_id,
        "post_title": f"帖子 {post_id}",
        "stockbar_code": "002085",
        "user_id": f"user-{post_id}",
        "user_nickname": f"股民{post_id}",
        "post_click_count": 100 + post_id,
        "post_comment_count": post_id,
        "post_publish_time": f"2026-01-06 17:{post_id % 60:02d}:04",
    }
    record.update(overrides)
    return record


def xueqiu_record(post_id: int, **overrides) -> Dict[str, Any]:
    record = {
        "id": post_id,
        "title": "",
        "text": f"雪球讨论 {post_id}",
        "user": {"id": 9000 + post_id, "screen_name": f"球友{post_id}"},
        "symbol": "SH600519",
        "created_at": 1767692764000 + post_id * 1000,
        "view_count": 10 * post_id,
        "reply_count": post_id,
    }
    record.update(overrides)
    return record


def make_post(
    native_id: Union[int, str],
    source: str = Platform.EASTMONEY.value,
    stock_code: str = "002085",
    publish_time: Optional[datetime] = None,
    created_at: Optional[datetime] = None,
    **overrides,
) -> CanonicalPost:
    fields = dict(
        id=make_post_id(source, native_id),
        title=f"title {native_id}",
        content=None,
        author=Author(id=f"u{native_id}", nickname=f"nick{native_id}"),
        stock_code=stock_code,
        publish_time=publish_time or datetime(2026, 1, 6, 9, 0, tzinfo=timezone.utc),
        click_count=1,
        comment_count=0,
        source=source,
        raw_data={"native_id": native_id},
        created_at=created_at or datetime(2026, 1, 7, 0, 0, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return CanonicalPost(**fields)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps):
    """Records pacing delays instead of waiting."""

    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep


@pytest.fixture
def eastmoney_fake() -> FakeCrawler:
    return FakeCrawler(
        pages={
            1: [eastmoney_record(1), eastmoney_record(2)],
            2: [eastmoney_record(3)],
        },
        platform=Platform.EASTMONEY,
    )


@pytest.fixture
def xueqiu_fake() -> FakeCrawler:
    return FakeCrawler(
        pages={1: [xueqiu_record(11), xueqiu_record(12)]},
        platform=Platform.XUEQIU,
    )


@pytest.fixture
def registry(eastmoney_fake, xueqiu_fake) -> CrawlerRegistry:
    registry = CrawlerRegistry()
    registry.register(Platform.EASTMONEY, eastmoney_fake)
    registry.register(Platform.XUEQIU, xueqiu_fake)
    return registry
