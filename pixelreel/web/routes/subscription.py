"""Subscription status, plan catalogue and Stripe configuration routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from pixelreel.billing.plans import PLAN_OFFERS, get_tier_features
from pixelreel.models.domain import Account
from pixelreel.types import Tier
from pixelreel.web.dependencies import AppContext, get_account, get_context

router = APIRouter(prefix="/api", tags=["subscription"])


@router.get("/subscription")
async def get_subscription(
    account: Account = Depends(get_account),
    context: AppContext = Depends(get_context),
) -> dict[str, Any]:
    snapshot = await context.limits.snapshot(account)
    features = snapshot.features
    return {
        "subscription": {
            "tier": str(snapshot.tier),
            "active": snapshot.active,
            "expiresAt": snapshot.expires_at.isoformat() if snapshot.expires_at else None,
            "features": features.to_api(),
        },
        "usage": {
            "images": {"used": snapshot.images_used, "limit": features.max_images_per_day},
            "videos": {"used": snapshot.videos_used, "limit": features.max_videos_per_day},
        },
    }


@router.get("/subscription-plans")
async def subscription_plans(context: AppContext = Depends(get_context)) -> dict[str, Any]:
    settings = context.settings
    price_ids = {Tier.BASIC: settings.stripe_basic_price_id, Tier.PREMIUM: settings.stripe_premium_price_id}
    product_ids = {
        Tier.BASIC: settings.stripe_basic_product_id,
        Tier.PREMIUM: settings.stripe_premium_product_id,
    }
    return {
        str(offer.tier): {
            "id": price_ids[offer.tier],
            "productId": product_ids[offer.tier],
            "name": offer.name,
            "price": offer.price,
            "features": get_tier_features(offer.tier).to_api(),
        }
        for offer in PLAN_OFFERS
    }


@router.get("/stripe-config-check")
async def stripe_config_check(context: AppContext = Depends(get_context)) -> dict[str, Any]:
    """Report which Stripe settings are present, never their values."""
    settings = context.settings
    return {
        "config": {
            "secretKeyExists": bool(settings.stripe_secret_key),
            "webhookSecretExists": bool(settings.stripe_webhook_secret),
            "basicPriceIdExists": bool(settings.stripe_basic_price_id),
            "premiumPriceIdExists": bool(settings.stripe_premium_price_id),
            "basicProductIdExists": bool(settings.stripe_basic_product_id),
            "premiumProductIdExists": bool(settings.stripe_premium_product_id),
        },
    }
