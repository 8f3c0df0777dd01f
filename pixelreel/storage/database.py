"""Async database engine factory and schema bootstrap."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel

from pixelreel.config.settings import Settings

# Register table models on SQLModel.metadata
from pixelreel.models import database as _models  # noqa: F401


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the process-wide async engine; owned and disposed by AppContext."""
    options: dict[str, Any] = {"echo": settings.debug}
    if not settings.database_url.startswith("sqlite"):
        options.update(pool_size=5, max_overflow=10, pool_pre_ping=True, pool_recycle=3600)
    return create_async_engine(settings.database_url, **options)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables (for dev/testing only; use Alembic in production)."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
