"""Usage ledger: per-account, per-day, per-kind generation counters."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from pixelreel.models.database import UsageCounter, _utc_now

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from pixelreel.types import ResourceKind

logger = structlog.get_logger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}

_KEY_COLUMNS = ["account_id", "resource_kind", "usage_date"]


def today() -> str:
    """Current UTC calendar day as YYYY-MM-DD."""
    return datetime.now(UTC).strftime("%Y-%m-%d")


class UsageLedger:
    """Reads and increments daily usage counters.

    Rows are never deleted and counts never decrease.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def get_count(self, account_id: str, kind: ResourceKind, day: str | None = None) -> int:
        """Return the counter for the key, 0 when no row exists."""
        day = day or today()
        async with AsyncSession(self._engine) as session:
            stmt = select(UsageCounter).where(
                col(UsageCounter.account_id) == account_id,
                col(UsageCounter.resource_kind) == str(kind),
                col(UsageCounter.usage_date) == day,
            )
            result = await session.execute(stmt)
            row = result.scalars().first()
            return int(row.count) if row else 0

    async def increment(self, account_id: str, kind: ResourceKind, day: str | None = None) -> int:
        """Atomically increment a usage counter and return the new count.

        Uses INSERT ... ON CONFLICT DO UPDATE SET count = count + 1 on
        PostgreSQL and SQLite; other dialects fall back to read-then-write.
        """
        day = day or today()
        insert_fn = _UPSERT_INSERTS.get(self._engine.dialect.name)
        if insert_fn is None:
            new_count = await self._increment_read_write(account_id, kind, day)
        else:
            now = _utc_now()
            stmt = (
                insert_fn(UsageCounter)
                .values(
                    account_id=account_id,
                    resource_kind=str(kind),
                    usage_date=day,
                    count=1,
                    created_at=now,
                    updated_at=now,
                )
                .on_conflict_do_update(
                    index_elements=_KEY_COLUMNS,
                    set_={"count": col(UsageCounter.count) + 1, "updated_at": now},
                )
                .returning(col(UsageCounter.count))
            )
            async with self._engine.begin() as conn:
                result = await conn.execute(stmt)
                row = result.fetchone()
            new_count = int(row[0]) if row else 1

        logger.debug(
            "usage_incremented", account_id=account_id, kind=str(kind), day=day, count=new_count
        )
        return new_count

    async def _increment_read_write(self, account_id: str, kind: ResourceKind, day: str) -> int:
        async with AsyncSession(self._engine) as session:
            stmt = select(UsageCounter).where(
                col(UsageCounter.account_id) == account_id,
                col(UsageCounter.resource_kind) == str(kind),
                col(UsageCounter.usage_date) == day,
            )
            result = await session.execute(stmt)
            row = result.scalars().first()
            if row is None:
                row = UsageCounter(
                    account_id=account_id, resource_kind=str(kind), usage_date=day, count=1
                )
            else:
                row.count += 1
                row.updated_at = _utc_now()
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return row.count
