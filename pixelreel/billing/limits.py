"""Admission control for generation requests against daily tier limits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from pixelreel.billing.plans import TierFeatures, get_tier_features, parse_tier
from pixelreel.models.domain import Allow, Decision, Deny
from pixelreel.storage.repositories.usage import today
from pixelreel.types import ResourceKind, Tier

if TYPE_CHECKING:
    from datetime import datetime

    from pixelreel.models.domain import Account
    from pixelreel.storage.repositories.subscriptions import EntitlementStore
    from pixelreel.storage.repositories.usage import UsageLedger

logger = structlog.get_logger(__name__)

REASON_INACTIVE = "subscription inactive"
REASON_LIMIT = "daily limit reached"


@dataclass(frozen=True, slots=True)
class UsageSnapshot:
    """Entitlement plus today's counters, as shown on the account dashboard."""

    tier: Tier
    active: bool
    expires_at: datetime | None
    features: TierFeatures
    images_used: int
    videos_used: int


class LimitEnforcer:
    """Combines the entitlement store and usage ledger to admit or deny requests.

    Admission and the later ledger increment are separate steps, so a burst
    of concurrent requests can each be admitted before any of them is
    counted. Enforcement is best-effort.
    """

    def __init__(self, entitlements: EntitlementStore, ledger: UsageLedger) -> None:
        self._entitlements = entitlements
        self._ledger = ledger

    async def admit(self, account: Account, kind: ResourceKind) -> Decision:
        subscription = await self._entitlements.get_current_subscription(account.id)
        tier = parse_tier(subscription.tier)
        features = get_tier_features(tier)

        if tier != Tier.FREE and not subscription.active:
            logger.info("admission_denied", account_id=account.id, reason=REASON_INACTIVE)
            return Deny(reason=REASON_INACTIVE, tier=tier, active=False, features=features)

        limit = features.daily_limit(kind)
        used = await self._ledger.get_count(account.id, kind, today())
        if used >= limit:
            logger.info(
                "admission_denied",
                account_id=account.id,
                reason=REASON_LIMIT,
                kind=str(kind),
                used=used,
                limit=limit,
            )
            return Deny(
                reason=REASON_LIMIT,
                tier=tier,
                active=subscription.active,
                features=features,
                used=used,
                limit=limit,
            )

        return Allow(tier=tier, features=features)

    async def record(self, account: Account, kind: ResourceKind) -> int:
        """Count one completed generation against today's usage."""
        return await self._ledger.increment(account.id, kind, today())

    async def snapshot(self, account: Account) -> UsageSnapshot:
        subscription = await self._entitlements.get_current_subscription(account.id)
        day = today()
        return UsageSnapshot(
            tier=parse_tier(subscription.tier),
            active=subscription.active,
            expires_at=subscription.expires_at,
            features=get_tier_features(subscription.tier),
            images_used=await self._ledger.get_count(account.id, ResourceKind.IMAGE, day),
            videos_used=await self._ledger.get_count(account.id, ResourceKind.VIDEO, day),
        )
