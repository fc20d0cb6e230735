"""Post store: duplicate-safe persistence and queries for CanonicalPosts.

Writes are INSERT ... ON CONFLICT (id) DO UPDATE statements, one
transaction per upsert_many() call, so a batch is applied entirely or
not at all and re-ingesting the same posts is idempotent.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

import structlog
from sqlalchemy import desc, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stockpulse.core.exceptions import InvalidRequestError, StorageError
from stockpulse.crawlers.base import Author, CanonicalPost, Platform
from stockpulse.models.post import Post

logger = structlog.get_logger(__name__)


DEFAULT_QUERY_LIMIT = 100

# Rows per INSERT statement; keeps SQLite under its bound-parameter limit
UPSERT_CHUNK_SIZE = 50

# Overwritten when a post is re-ingested. id, source and created_at are not.
MUTABLE_COLUMNS = (
    "title",
    "content",
    "author_id",
    "author_nickname",
    "stock_code",
    "publish_time",
    "click_count",
    "comment_count",
    "raw_data",
    "updated_at",
)


@dataclass
class PostStats:
    """Aggregate counts over the stored posts."""

    total_posts: int = 0
    by_platform: Dict[str, int] = field(default_factory=dict)
    by_stock: Dict[str, int] = field(default_factory=dict)


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored instant is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _platform_value(platform: Union[Platform, str, None]) -> Optional[str]:
    if platform is None:
        return None
    return platform.value if isinstance(platform, Platform) else str(platform)


class PostStore:
    """Service for persisting and querying canonical posts."""

    def __init__(self, db: AsyncSession):
        """Initialize post store.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger.bind(service="post_store")

    async def upsert_many(self, posts: Sequence[CanonicalPost]) -> int:
        """Insert new posts and overwrite the mutable fields of existing ones.

        Posts sharing an id within the batch collapse to the last one.

        Args:
            posts: Canonical posts to persist

        Returns:
            Number of distinct posts inserted or updated

        Raises:
            StorageError: If the database rejects the batch (nothing is written)
        """
        if not posts:
            return 0

        now = datetime.now(timezone.utc)
        rows: Dict[str, Dict[str, Any]] = {}
        for post in posts:
            rows[post.id] = self._to_row(post, now)
        values = list(rows.values())

        insert = pg_insert if self._dialect_name() == "postgresql" else sqlite_insert

        self.logger.info("upserting_posts", count=len(values))
        try:
            for start in range(0, len(values), UPSERT_CHUNK_SIZE):
                stmt = insert(Post).values(values[start:start + UPSERT_CHUNK_SIZE])
                stmt = stmt.on_conflict_do_update(
                    index_elements=[Post.id],
                    set_={column: stmt.excluded[column] for column in MUTABLE_COLUMNS},
                )
                await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            self.logger.error("upsert_failed", count=len(values), error=str(e))
            raise StorageError(f"Failed to upsert {len(values)} posts: {e}") from e

        self.logger.info("posts_upserted", count=len(values))
        return len(values)

    async def query(
        self,
        stock_code: Optional[str] = None,
        platform: Union[Platform, str, None] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> List[CanonicalPost]:
        """Return posts newest-first, filtered by stock code and/or platform.

        Args:
            stock_code: Only posts of this stock code
            platform: Only posts from this platform
            limit: Maximum number of posts (default 100)

        Raises:
            InvalidRequestError: If limit is below 1
            StorageError: If the query fails
        """
        if limit < 1:
            raise InvalidRequestError("limit must be >= 1")

        stmt = select(Post)
        if stock_code:
            stmt = stmt.where(Post.stock_code == stock_code)
        source = _platform_value(platform)
        if source:
            stmt = stmt.where(Post.source == source)
        stmt = (
            stmt.order_by(Post.publish_time.desc(), Post.id.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )

        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            self.logger.error("query_failed", error=str(e))
            raise StorageError(f"Failed to query posts: {e}") from e

        return [self._to_post(row) for row in result.scalars().all()]

    async def get(self, post_id: str) -> Optional[CanonicalPost]:
        """Fetch one post by canonical id."""
        try:
            row = await self.db.get(Post, post_id, populate_existing=True)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load post {post_id}: {e}") from e
        return self._to_post(row) if row else None

    async def get_stats(self, top_stocks: int = 10) -> PostStats:
        """Count posts overall, per platform, and for the busiest stock codes.

        Args:
            top_stocks: How many stock codes to report, by descending count
        """
        try:
            total = await self.db.scalar(select(func.count()).select_from(Post))

            platform_rows = await self.db.execute(
                select(Post.source, func.count()).group_by(Post.source)
            )

            post_count = func.count().label("post_count")
            stock_rows = await self.db.execute(
                select(Post.stock_code, post_count)
                .group_by(Post.stock_code)
                .order_by(desc(post_count), Post.stock_code)
                .limit(top_stocks)
            )
        except SQLAlchemyError as e:
            self.logger.error("stats_failed", error=str(e))
            raise StorageError(f"Failed to compute stats: {e}") from e

        return PostStats(
            total_posts=total or 0,
            by_platform={source: count for source, count in platform_rows.all()},
            by_stock={code: count for code, count in stock_rows.all()},
        )

    def _dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    @staticmethod
    def _to_row(post: CanonicalPost, now: datetime) -> Dict[str, Any]:
        return {
            "id": post.id,
            "title": post.title,
            "content": post.content,
            "author_id": post.author.id,
            "author_nickname": post.author.nickname,
            "stock_code": post.stock_code,
            "source": post.source,
            "publish_time": _as_utc(post.publish_time),
            "click_count": post.click_count,
            "comment_count": post.comment_count,
            "raw_data": post.raw_data,
            "created_at": _as_utc(post.created_at),
            "updated_at": now,
        }

    @staticmethod
    def _to_post(row: Post) -> CanonicalPost:
        return CanonicalPost(
            id=row.id,
            title=row.title,
            content=row.content,
            author=Author(id=row.author_id, nickname=row.author_nickname),
            stock_code=row.stock_code,
            publish_time=_as_utc(row.publish_time),
            click_count=row.click_count,
            comment_count=row.comment_count,
            source=row.source,
            raw_data=row.raw_data or {},
            created_at=_as_utc(row.created_at),
        )
