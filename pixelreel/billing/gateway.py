"""Stripe client wrapper: webhook verification, customers, checkout and portal."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import stripe
import structlog

from pixelreel.exceptions import ConfigError, InvalidRequest, InvalidSignature, UpstreamFailure

logger = structlog.get_logger(__name__)

# Reject webhook deliveries signed more than 5 minutes ago
_SIGNATURE_TOLERANCE = 300


class StripeGateway:
    """Explicitly constructed Stripe client owned by the application context.

    SDK calls are blocking and run in a worker thread.
    """

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str | None = None,
        tolerance: int = _SIGNATURE_TOLERANCE,
    ) -> None:
        self._client = stripe.StripeClient(secret_key) if secret_key else None
        self._webhook_secret = (webhook_secret or "").strip()
        self._tolerance = tolerance

    @property
    def configured(self) -> bool:
        return self._client is not None

    def verify_signature(self, payload: bytes, signature_header: str | None) -> dict[str, Any]:
        """Verify the ``stripe-signature`` header over the raw body and parse the event.

        Raises InvalidSignature before any parsing when verification fails.
        """
        if not self._webhook_secret:
            logger.error("webhook_secret_missing")
            raise ConfigError("Stripe webhook secret is not configured")
        if not signature_header:
            raise InvalidSignature("Missing stripe-signature header")

        try:
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"),
                signature_header,
                self._webhook_secret,
                self._tolerance,
            )
        except (stripe.SignatureVerificationError, UnicodeDecodeError) as exc:
            logger.warning("webhook_signature_invalid", error=str(exc))
            raise InvalidSignature("Webhook signature verification failed") from exc

        try:
            event: dict[str, Any] = json.loads(payload)
        except ValueError as exc:
            raise InvalidRequest("Webhook payload is not valid JSON") from exc
        return event

    async def retrieve_customer_account_id(self, customer_id: str) -> str | None:
        """Return ``metadata.userId`` of a customer, or None if deleted or unlinked."""
        customer = await self._call(self._require_client().v1.customers.retrieve, customer_id)
        if getattr(customer, "deleted", False):
            logger.warning("stripe_customer_deleted", customer_id=customer_id)
            return None
        metadata = getattr(customer, "metadata", None)
        account_id = getattr(metadata, "userId", None) if metadata is not None else None
        return str(account_id) if account_id else None

    async def create_customer(self, account_id: str, email: str | None) -> str:
        params: dict[str, Any] = {"metadata": {"userId": account_id}}
        if email:
            params["email"] = email
        customer = await self._call(self._require_client().v1.customers.create, params=params)
        logger.info("stripe_customer_created", account_id=account_id, customer_id=customer.id)
        return str(customer.id)

    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
    ) -> tuple[str, str]:
        """Create a subscription checkout session; returns (session id, redirect URL)."""
        session = await self._call(
            self._require_client().v1.checkout.sessions.create,
            params={
                "customer": customer_id,
                "payment_method_types": ["card"],
                "line_items": [{"price": price_id, "quantity": 1}],
                "mode": "subscription",
                "success_url": success_url,
                "cancel_url": cancel_url,
            },
        )
        return str(session.id), str(session.url)

    async def create_portal_session(self, customer_id: str, return_url: str) -> str:
        session = await self._call(
            self._require_client().v1.billing_portal.sessions.create,
            params={"customer": customer_id, "return_url": return_url},
        )
        return str(session.url)

    def _require_client(self) -> stripe.StripeClient:
        if self._client is None:
            raise ConfigError("STRIPE_SECRET_KEY is not configured")
        return self._client

    @staticmethod
    async def _call(func: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except stripe.StripeError as exc:
            logger.warning("stripe_call_failed", error=str(exc), code=getattr(exc, "code", None))
            msg = "Payment provider request failed"
            raise UpstreamFailure(msg) from exc
