"""Database bootstrap helpers."""

from pathlib import Path
from typing import Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine

from stockpulse.db.session import engine as default_engine
from stockpulse.models import Base


def _ensure_sqlite_dir(engine: AsyncEngine) -> None:
    url = make_url(str(engine.url))
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


async def init_db(engine: Optional[AsyncEngine] = None) -> None:
    """Create the posts table and its indexes if they don't exist."""
    engine = engine or default_engine
    _ensure_sqlite_dir(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
