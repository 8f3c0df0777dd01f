import pytest

from pixelreel.billing.plans import (
    PLAN_OFFERS,
    TIER_FEATURES,
    TierFeatures,
    get_tier_features,
    parse_tier,
    tier_for_price,
    validate_feature_table,
)
from pixelreel.exceptions import ConfigError
from pixelreel.types import ResourceKind, Tier


@pytest.mark.unit
class TestTierFeatures:
    @pytest.mark.parametrize(
        ("tier", "images", "videos", "length", "hq"),
        [
            (Tier.FREE, 3, 1, 5, False),
            (Tier.BASIC, 10, 5, 15, False),
            (Tier.PREMIUM, 30, 15, 30, True),
        ],
    )
    def test_table_values(self, tier: Tier, images: int, videos: int, length: int, hq: bool) -> None:
        features = TIER_FEATURES[tier]
        assert features.max_images_per_day == images
        assert features.max_videos_per_day == videos
        assert features.max_video_length_seconds == length
        assert features.high_quality_generation is hq

    def test_daily_limit_by_kind(self) -> None:
        features = TIER_FEATURES[Tier.BASIC]
        assert features.daily_limit(ResourceKind.IMAGE) == 10
        assert features.daily_limit(ResourceKind.VIDEO) == 5

    def test_to_api_uses_camel_case(self) -> None:
        assert TIER_FEATURES[Tier.FREE].to_api() == {
            "maxImagesPerDay": 3,
            "maxVideosPerDay": 1,
            "maxVideoLength": 5,
            "highQualityGeneration": False,
        }

    def test_offers_prices(self) -> None:
        prices = {offer.tier: offer.price for offer in PLAN_OFFERS}
        assert prices == {Tier.BASIC: 9.99, Tier.PREMIUM: 19.99}


@pytest.mark.unit
class TestTierParsing:
    def test_known_tier(self) -> None:
        assert parse_tier("premium") is Tier.PREMIUM

    def test_unknown_tier_falls_back_to_free(self) -> None:
        assert parse_tier("enterprise") is Tier.FREE
        assert get_tier_features("enterprise") == TIER_FEATURES[Tier.FREE]

    def test_none_is_free(self) -> None:
        assert parse_tier(None) is Tier.FREE

    def test_tier_for_configured_price(self) -> None:
        mapping = {"price_basic": "basic", "price_premium": "premium"}
        assert tier_for_price("price_premium", mapping) is Tier.PREMIUM

    def test_tier_for_unknown_price_is_free(self) -> None:
        assert tier_for_price("price_other", {"price_basic": "basic"}) is Tier.FREE
        assert tier_for_price(None, {"price_basic": "basic"}) is Tier.FREE


@pytest.mark.unit
class TestValidateFeatureTable:
    def test_default_table_is_valid(self) -> None:
        validate_feature_table()

    def test_missing_tier_rejected(self) -> None:
        table = {Tier.FREE: TIER_FEATURES[Tier.FREE], Tier.BASIC: TIER_FEATURES[Tier.BASIC]}
        with pytest.raises(ConfigError, match="premium"):
            validate_feature_table(table)

    def test_negative_limit_rejected(self) -> None:
        table = dict(TIER_FEATURES)
        table[Tier.FREE] = TierFeatures(-1, 1, 5, False)
        with pytest.raises(ConfigError, match="non-negative"):
            validate_feature_table(table)

    def test_decreasing_limit_rejected(self) -> None:
        table = dict(TIER_FEATURES)
        table[Tier.PREMIUM] = TierFeatures(5, 15, 30, True)
        with pytest.raises(ConfigError, match="premium.max_images_per_day"):
            validate_feature_table(table)
