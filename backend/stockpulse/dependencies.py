"""FastAPI dependency injection providers."""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stockpulse.crawlers.factory import CrawlerRegistry, get_crawler_registry
from stockpulse.db.session import async_session_factory
from stockpulse.services.crawl_service import CrawlService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for request-scoped usage.

    Rolled back on error and always closed after the request completes.
    Services commit their own writes.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_registry() -> CrawlerRegistry:
    return get_crawler_registry()


async def get_crawl_service(
    db: AsyncSession = Depends(get_db),
    registry: CrawlerRegistry = Depends(get_registry),
) -> CrawlService:
    return CrawlService(db, registry=registry)
