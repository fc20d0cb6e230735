"""Post model storing canonical forum posts from every platform."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stockpulse.models.base import Base, TimestampMixin


class Post(TimestampMixin, Base):
    """A forum post normalized from one source platform.

    The primary key is the canonical id "{source}_{native id}", so the
    (platform, native id) pair is unique and re-ingestion upserts in place.
    """

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, comment="{source}_{native id}")

    # Content
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Author
    author_id: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    author_nickname: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    # Classification
    stock_code: Mapped[str] = mapped_column(
        String(32), nullable=False, default="", index=True, comment="Ticker or forum code"
    )
    source: Mapped[str] = mapped_column(
        String(32), nullable=False, index=True, comment="Platform tag, e.g. 'eastmoney'"
    )
    publish_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True, comment="Publish instant (UTC)"
    )

    # Engagement
    click_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Original record for replay/debugging
    raw_data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("idx_posts_stock_source", "stock_code", "source"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, source={self.source}, title='{self.title[:30]}')>"
