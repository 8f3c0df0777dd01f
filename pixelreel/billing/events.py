"""Typed payment-provider lifecycle events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class SubscriptionChanged:
    """``customer.subscription.created`` or ``customer.subscription.updated``."""

    event_type: str
    subscription_id: str
    customer_id: str
    status: str
    price_id: str | None
    current_period_end: datetime | None


@dataclass(frozen=True, slots=True)
class SubscriptionDeleted:
    """``customer.subscription.deleted``."""

    subscription_id: str


@dataclass(frozen=True, slots=True)
class CheckoutCompleted:
    """``checkout.session.completed``; entitlement follows via SubscriptionChanged."""

    session_id: str
    customer_id: str | None


@dataclass(frozen=True, slots=True)
class UnhandledEvent:
    event_type: str


LifecycleEvent = SubscriptionChanged | SubscriptionDeleted | CheckoutCompleted | UnhandledEvent


def _customer_id(value: Any) -> str:
    # Expanded objects carry the id inside
    if isinstance(value, dict):
        return str(value.get("id", ""))
    return str(value or "")


def _period_end(subscription: dict[str, Any]) -> datetime | None:
    """Read ``current_period_end`` from the subscription or, on newer API versions, its item."""
    timestamp = subscription.get("current_period_end")
    if timestamp is None:
        items = subscription.get("items", {}).get("data", [])
        if items:
            timestamp = items[0].get("current_period_end")
    if timestamp is None:
        return None
    return datetime.fromtimestamp(int(timestamp), UTC).replace(tzinfo=None)


def _price_id(subscription: dict[str, Any]) -> str | None:
    items = subscription.get("items", {}).get("data", [])
    if not items:
        return None
    price = items[0].get("price") or {}
    return price.get("id") if isinstance(price, dict) else str(price)


def parse_event(event: dict[str, Any]) -> LifecycleEvent:
    """Convert a verified Stripe event payload into a typed variant."""
    event_type = str(event.get("type", ""))
    obj: dict[str, Any] = event.get("data", {}).get("object", {}) or {}

    if event_type in ("customer.subscription.created", "customer.subscription.updated"):
        return SubscriptionChanged(
            event_type=event_type,
            subscription_id=str(obj.get("id", "")),
            customer_id=_customer_id(obj.get("customer")),
            status=str(obj.get("status", "")),
            price_id=_price_id(obj),
            current_period_end=_period_end(obj),
        )
    if event_type == "customer.subscription.deleted":
        return SubscriptionDeleted(subscription_id=str(obj.get("id", "")))
    if event_type == "checkout.session.completed":
        customer = obj.get("customer")
        return CheckoutCompleted(
            session_id=str(obj.get("id", "")),
            customer_id=_customer_id(customer) if customer else None,
        )
    return UnhandledEvent(event_type=event_type)
