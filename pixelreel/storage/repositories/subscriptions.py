"""Entitlement store: per-account subscription rows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from pixelreel.models.database import Subscription, _utc_now
from pixelreel.types import Tier

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)

_UPSERT_FIELDS = frozenset(
    {
        "tier",
        "active",
        "status",
        "external_customer_ref",
        "external_subscription_ref",
        "expires_at",
    }
)


class EntitlementStore:
    """Resolves and mutates the current subscription of an account.

    An account may have several historical rows; the most recently created
    one is current, whatever its ``active`` flag says.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def find_current(self, account_id: str) -> Subscription | None:
        """Return the newest subscription row, or None if the account has none."""
        async with AsyncSession(self._engine) as session:
            return await self._newest(session, account_id)

    async def get_current_subscription(self, account_id: str) -> Subscription:
        """Return the current subscription, persisting a free default when absent."""
        async with AsyncSession(self._engine) as session:
            current = await self._newest(session, account_id)
            if current is not None:
                return current

            default = Subscription(
                account_id=account_id,
                tier=Tier.FREE,
                active=True,
                status="active",
                expires_at=None,
            )
            session.add(default)
            await session.commit()
            await session.refresh(default)
            logger.info("subscription_default_created", account_id=account_id)
            return default

    async def upsert_for_account(self, account_id: str, **fields: Any) -> Subscription:
        """Update the account's newest row or insert one. Last write wins."""
        unknown = set(fields) - _UPSERT_FIELDS
        if unknown:
            msg = f"Unknown subscription fields: {sorted(unknown)}"
            raise ValueError(msg)

        async with AsyncSession(self._engine) as session:
            row = await self._newest(session, account_id)
            if row is None:
                row = Subscription(account_id=account_id, **fields)
            else:
                for name, value in fields.items():
                    setattr(row, name, value)
                row.updated_at = _utc_now()
            session.add(row)
            await session.commit()
            await session.refresh(row)
        logger.info(
            "subscription_upserted",
            account_id=account_id,
            tier=row.tier,
            active=row.active,
            status=row.status,
        )
        return row

    async def mark_canceled(self, external_subscription_ref: str) -> int:
        """Deactivate every row carrying the given provider subscription id.

        Returns the number of rows changed (0 when the id is unknown).
        """
        async with AsyncSession(self._engine) as session:
            stmt = select(Subscription).where(
                col(Subscription.external_subscription_ref) == external_subscription_ref
            )
            result = await session.execute(stmt)
            rows = list(result.scalars().all())
            for row in rows:
                row.active = False
                row.status = "canceled"
                row.updated_at = _utc_now()
                session.add(row)
            if rows:
                await session.commit()
        return len(rows)

    async def find_customer_ref(self, account_id: str) -> str | None:
        """Return the customer id from the newest active row that has one."""
        async with AsyncSession(self._engine) as session:
            stmt = (
                select(Subscription)
                .where(
                    col(Subscription.account_id) == account_id,
                    col(Subscription.active).is_(True),
                    col(Subscription.external_customer_ref).is_not(None),
                )
                .order_by(col(Subscription.created_at).desc())
                .limit(1)
            )
            result = await session.execute(stmt)
            row = result.scalars().first()
            return row.external_customer_ref if row else None

    @staticmethod
    async def _newest(session: AsyncSession, account_id: str) -> Subscription | None:
        stmt = (
            select(Subscription)
            .where(col(Subscription.account_id) == account_id)
            .order_by(col(Subscription.created_at).desc(), col(Subscription.id).desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalars().first()
