"""SQLAlchemy models for StockPulse.

All models are imported here so Base.metadata knows every table.
"""

from stockpulse.models.base import Base, TimestampMixin
from stockpulse.models.post import Post

__all__ = [
    "Base",
    "TimestampMixin",
    "Post",
]
