"""Subscription tier definitions with concrete daily limits."""

from __future__ import annotations

from dataclasses import dataclass

from pixelreel.exceptions import ConfigError
from pixelreel.types import ResourceKind, Tier


@dataclass(frozen=True, slots=True)
class TierFeatures:
    """Generation limits for a subscription tier."""

    max_images_per_day: int
    max_videos_per_day: int
    max_video_length_seconds: int
    high_quality_generation: bool

    def daily_limit(self, kind: ResourceKind) -> int:
        if kind == ResourceKind.VIDEO:
            return self.max_videos_per_day
        return self.max_images_per_day

    def to_api(self) -> dict[str, object]:
        """Serialize with the camelCase keys the web client expects."""
        return {
            "maxImagesPerDay": self.max_images_per_day,
            "maxVideosPerDay": self.max_videos_per_day,
            "maxVideoLength": self.max_video_length_seconds,
            "highQualityGeneration": self.high_quality_generation,
        }


TIER_FEATURES: dict[Tier, TierFeatures] = {
    Tier.FREE: TierFeatures(
        max_images_per_day=3,
        max_videos_per_day=1,
        max_video_length_seconds=5,
        high_quality_generation=False,
    ),
    Tier.BASIC: TierFeatures(
        max_images_per_day=10,
        max_videos_per_day=5,
        max_video_length_seconds=15,
        high_quality_generation=False,
    ),
    Tier.PREMIUM: TierFeatures(
        max_images_per_day=30,
        max_videos_per_day=15,
        max_video_length_seconds=30,
        high_quality_generation=True,
    ),
}


@dataclass(frozen=True, slots=True)
class PlanOffer:
    """A purchasable plan as shown on the pricing page."""

    tier: Tier
    name: str
    price: float


PLAN_OFFERS: tuple[PlanOffer, ...] = (
    PlanOffer(tier=Tier.BASIC, name="Basic", price=9.99),
    PlanOffer(tier=Tier.PREMIUM, name="Premium", price=19.99),
)

_TIER_ORDER = (Tier.FREE, Tier.BASIC, Tier.PREMIUM)


def parse_tier(value: str | None) -> Tier:
    """Parse a stored tier string, defaulting to free for unknown values."""
    try:
        return Tier(value or Tier.FREE)
    except ValueError:
        return Tier.FREE


def get_tier_features(tier: Tier | str | None) -> TierFeatures:
    """Get features for a tier, defaulting to free tier."""
    return TIER_FEATURES[parse_tier(tier)]


def tier_for_price(price_id: str | None, price_tiers: dict[str, str]) -> Tier:
    """Map a payment-provider price id to a tier; unknown prices map to free."""
    if not price_id:
        return Tier.FREE
    return parse_tier(price_tiers.get(price_id))


def validate_feature_table(table: dict[Tier, TierFeatures] | None = None) -> None:
    """Check the feature table is complete, non-negative and non-decreasing by tier.

    Raises ConfigError on the first violation.
    """
    table = TIER_FEATURES if table is None else table
    missing = [tier.value for tier in Tier if tier not in table]
    if missing:
        msg = f"Tier feature table is missing tiers: {', '.join(missing)}"
        raise ConfigError(msg)

    for tier, features in table.items():
        for name in ("max_images_per_day", "max_videos_per_day", "max_video_length_seconds"):
            if getattr(features, name) < 0:
                msg = f"{tier.value}.{name} must be non-negative"
                raise ConfigError(msg)

    for lower, higher in zip(_TIER_ORDER, _TIER_ORDER[1:], strict=False):
        for name in ("max_images_per_day", "max_videos_per_day", "max_video_length_seconds"):
            if getattr(table[higher], name) < getattr(table[lower], name):
                msg = f"{higher.value}.{name} is lower than {lower.value}.{name}"
                raise ConfigError(msg)
