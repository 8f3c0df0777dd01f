"""Unit tests for StripeGateway calls against a mocked StripeClient."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import stripe

from pixelreel.billing.gateway import StripeGateway
from pixelreel.exceptions import ConfigError, UpstreamFailure

_KEY = "sk_test_123"


def _gateway_with(client: MagicMock) -> StripeGateway:
    gateway = StripeGateway(secret_key=_KEY)
    gateway._client = client
    return gateway


def _customer(**values: object) -> stripe.Customer:
    return stripe.Customer.construct_from({"id": "cus_1", **values}, _KEY)


@pytest.mark.unit
class TestRetrieveCustomerAccountId:
    @pytest.mark.asyncio
    async def test_linked_customer(self) -> None:
        client = MagicMock()
        client.v1.customers.retrieve.return_value = _customer(metadata={"userId": "acct-1"})

        account_id = await _gateway_with(client).retrieve_customer_account_id("cus_1")

        assert account_id == "acct-1"
        client.v1.customers.retrieve.assert_called_once_with("cus_1")

    @pytest.mark.asyncio
    async def test_customer_without_user_id(self) -> None:
        client = MagicMock()
        client.v1.customers.retrieve.return_value = _customer(metadata={"plan": "basic"})
        assert await _gateway_with(client).retrieve_customer_account_id("cus_1") is None

    @pytest.mark.asyncio
    async def test_customer_without_metadata(self) -> None:
        client = MagicMock()
        client.v1.customers.retrieve.return_value = _customer()
        assert await _gateway_with(client).retrieve_customer_account_id("cus_1") is None

    @pytest.mark.asyncio
    async def test_deleted_customer(self) -> None:
        client = MagicMock()
        client.v1.customers.retrieve.return_value = _customer(
            deleted=True, metadata={"userId": "acct-1"}
        )
        assert await _gateway_with(client).retrieve_customer_account_id("cus_1") is None

    @pytest.mark.asyncio
    async def test_stripe_error_is_upstream_failure(self) -> None:
        client = MagicMock()
        client.v1.customers.retrieve.side_effect = stripe.APIConnectionError("network down")
        with pytest.raises(UpstreamFailure):
            await _gateway_with(client).retrieve_customer_account_id("cus_1")

    @pytest.mark.asyncio
    async def test_unconfigured_gateway(self) -> None:
        gateway = StripeGateway(secret_key="")
        assert gateway.configured is False
        with pytest.raises(ConfigError):
            await gateway.retrieve_customer_account_id("cus_1")


@pytest.mark.unit
class TestSessions:
    @pytest.mark.asyncio
    async def test_create_customer_links_account(self) -> None:
        client = MagicMock()
        client.v1.customers.create.return_value = _customer()

        customer_id = await _gateway_with(client).create_customer("acct-1", "user@example.com")

        assert customer_id == "cus_1"
        params = client.v1.customers.create.call_args.kwargs["params"]
        assert params == {"metadata": {"userId": "acct-1"}, "email": "user@example.com"}

    @pytest.mark.asyncio
    async def test_checkout_session(self) -> None:
        client = MagicMock()
        client.v1.checkout.sessions.create.return_value = stripe.checkout.Session.construct_from(
            {"id": "cs_1", "url": "https://checkout.stripe.test/cs_1"}, _KEY
        )

        session_id, url = await _gateway_with(client).create_checkout_session(
            "cus_1", "price_basic", "https://app/success", "https://app/canceled"
        )

        assert (session_id, url) == ("cs_1", "https://checkout.stripe.test/cs_1")
        params = client.v1.checkout.sessions.create.call_args.kwargs["params"]
        assert params["mode"] == "subscription"
        assert params["line_items"] == [{"price": "price_basic", "quantity": 1}]

    @pytest.mark.asyncio
    async def test_portal_session(self) -> None:
        client = MagicMock()
        client.v1.billing_portal.sessions.create.return_value = (
            stripe.billing_portal.Session.construct_from(
                {"id": "bps_1", "url": "https://billing.stripe.test/p"}, _KEY
            )
        )

        url = await _gateway_with(client).create_portal_session("cus_1", "https://app/dashboard")

        assert url == "https://billing.stripe.test/p"
        params = client.v1.billing_portal.sessions.create.call_args.kwargs["params"]
        assert params == {"customer": "cus_1", "return_url": "https://app/dashboard"}
