"""Stripe webhook receiver plus checkout and customer-portal sessions."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request

from pixelreel.exceptions import InvalidRequest
from pixelreel.models.api import CheckoutRequest
from pixelreel.models.domain import Account
from pixelreel.web.dependencies import AppContext, get_account, get_context

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["billing"])


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    context: AppContext = Depends(get_context),
) -> dict[str, bool]:
    """Receive a Stripe lifecycle event.

    The signature is checked against the raw body, so the payload must not
    be parsed before it reaches the synchronizer.
    """
    payload = await request.body()
    await context.synchronizer.handle(payload, request.headers.get("stripe-signature"))
    return {"received": True}


@router.post("/create-checkout-session")
async def create_checkout_session(
    body: CheckoutRequest,
    account: Account = Depends(get_account),
    context: AppContext = Depends(get_context),
) -> dict[str, str]:
    if not body.price_id:
        raise InvalidRequest("No price ID provided")

    customer_id = await context.entitlements.find_customer_ref(account.id)
    if not customer_id:
        customer_id = await context.gateway.create_customer(account.id, account.email)

    frontend = context.settings.frontend_url.rstrip("/")
    session_id, url = await context.gateway.create_checkout_session(
        customer_id=customer_id,
        price_id=body.price_id,
        success_url=f"{frontend}/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{frontend}/canceled",
    )
    logger.info("checkout_session_created", account_id=account.id, price_id=body.price_id)
    return {"sessionId": session_id, "url": url}


@router.post("/create-portal-session")
async def create_portal_session(
    account: Account = Depends(get_account),
    context: AppContext = Depends(get_context),
) -> dict[str, str]:
    customer_id = await context.entitlements.find_customer_ref(account.id)
    if not customer_id:
        raise InvalidRequest("No subscription found for this user")

    url = await context.gateway.create_portal_session(
        customer_id, return_url=f"{context.settings.frontend_url.rstrip('/')}/dashboard"
    )
    return {"url": url}
