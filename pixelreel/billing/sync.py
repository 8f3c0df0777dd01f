"""Subscription synchronizer: applies Stripe lifecycle events to the entitlement store."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

import structlog

from pixelreel.billing.events import (
    CheckoutCompleted,
    LifecycleEvent,
    SubscriptionChanged,
    SubscriptionDeleted,
    UnhandledEvent,
    parse_event,
)
from pixelreel.billing.plans import tier_for_price
from pixelreel.exceptions import UpstreamFailure
from pixelreel.types import ACTIVE_STATUSES

if TYPE_CHECKING:
    from pixelreel.billing.gateway import StripeGateway
    from pixelreel.storage.repositories.subscriptions import EntitlementStore

logger = structlog.get_logger(__name__)


class SubscriptionSynchronizer:
    """Verifies webhook deliveries and keeps subscription rows in step with Stripe.

    There is no retry queue: a failed update surfaces as an error so that
    Stripe redelivers the event.
    """

    def __init__(
        self,
        gateway: StripeGateway,
        entitlements: EntitlementStore,
        price_tiers: dict[str, str],
    ) -> None:
        self._gateway = gateway
        self._entitlements = entitlements
        self._price_tiers = price_tiers

    async def handle(self, payload: bytes, signature_header: str | None) -> LifecycleEvent:
        """Verify, parse and apply one delivery. Returns the parsed event."""
        raw_event = self._gateway.verify_signature(payload, signature_header)
        event = parse_event(raw_event)
        logger.info("webhook_received", event_type=raw_event.get("type", ""))

        try:
            await self.dispatch(event)
        except UpstreamFailure:
            raise
        except Exception as exc:
            logger.error("webhook_dispatch_failed", event_type=raw_event.get("type", ""), error=str(exc))
            msg = "Error handling webhook event"
            raise UpstreamFailure(msg) from exc
        return event

    async def dispatch(self, event: LifecycleEvent) -> None:
        match event:
            case SubscriptionChanged():
                await self._on_subscription_changed(event)
            case SubscriptionDeleted():
                await self._on_subscription_deleted(event)
            case CheckoutCompleted():
                logger.info(
                    "checkout_completed",
                    session_id=event.session_id,
                    customer_id=event.customer_id,
                )
            case UnhandledEvent():
                logger.debug("webhook_unhandled_event", event_type=event.event_type)
            case _:
                assert_never(event)

    async def _on_subscription_changed(self, event: SubscriptionChanged) -> None:
        account_id = await self._gateway.retrieve_customer_account_id(event.customer_id)
        if not account_id:
            logger.warning(
                "subscription_sync_missing_account",
                customer_id=event.customer_id,
                subscription_id=event.subscription_id,
            )
            return

        tier = tier_for_price(event.price_id, self._price_tiers)
        await self._entitlements.upsert_for_account(
            account_id,
            tier=tier,
            active=event.status in ACTIVE_STATUSES,
            status=event.status,
            external_customer_ref=event.customer_id,
            external_subscription_ref=event.subscription_id,
            expires_at=event.current_period_end,
        )
        logger.info(
            "subscription_synced",
            account_id=account_id,
            subscription_id=event.subscription_id,
            tier=str(tier),
            status=event.status,
        )

    async def _on_subscription_deleted(self, event: SubscriptionDeleted) -> None:
        changed = await self._entitlements.mark_canceled(event.subscription_id)
        if not changed:
            logger.warning("subscription_cancel_unknown", subscription_id=event.subscription_id)
            return
        logger.info("subscription_canceled", subscription_id=event.subscription_id, rows=changed)
