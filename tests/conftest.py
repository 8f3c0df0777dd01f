"""Shared test fixtures."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from typing import Any

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel

from pixelreel.config.settings import Settings
from pixelreel.generation.provider import ImageProviderBase, VideoProviderBase
from pixelreel.models.domain import VideoTaskStatus
from pixelreel.web.app import create_app
from pixelreel.web.dependencies import build_context

JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes!"
WEBHOOK_SECRET = "whsec_test_secret"
ONE_PIXEL_PNG = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def make_token(account_id: str = "acct-1", email: str | None = "user@example.com") -> str:
    """A Supabase-style access token signed with the test JWT secret."""
    payload: dict[str, Any] = {
        "sub": account_id,
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


def auth_headers(account_id: str = "acct-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(account_id)}"}


def sign_stripe_payload(
    payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None
) -> str:
    """Build a ``stripe-signature`` header (``t=…,v1=…``) for the payload."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.{payload.decode()}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def subscription_event(
    event_type: str = "customer.subscription.updated",
    subscription_id: str = "sub_1",
    customer: str = "cus_1",
    status: str = "active",
    price_id: str = "price_basic",
    period_end: int | None = 1_900_000_000,
) -> bytes:
    obj: dict[str, Any] = {
        "id": subscription_id,
        "object": "subscription",
        "customer": customer,
        "status": status,
        "items": {"data": [{"price": {"id": price_id}}]},
    }
    if period_end is not None:
        obj["current_period_end"] = period_end
    return json.dumps({"id": "evt_1", "type": event_type, "data": {"object": obj}}).encode()


class FakeVideoProvider(VideoProviderBase):
    """Records submissions and serves canned task statuses."""

    def __init__(self) -> None:
        self.submissions: list[dict[str, Any]] = []
        self.statuses: dict[str, VideoTaskStatus] = {}

    async def submit(
        self,
        mode: Any,
        prompt: str,
        aspect_ratio: str,
        duration_seconds: int,
        image_url: str | None = None,
    ) -> str:
        self.submissions.append(
            {
                "mode": str(mode),
                "prompt": prompt,
                "aspect_ratio": aspect_ratio,
                "duration_seconds": duration_seconds,
                "image_url": image_url,
            }
        )
        return f"task-{len(self.submissions)}"

    async def status(self, task_id: str) -> VideoTaskStatus:
        return self.statuses.get(task_id, VideoTaskStatus(task_id=task_id, status="PENDING"))


class FakeImageProvider(ImageProviderBase):
    def __init__(self, images: list[str] | None = None) -> None:
        self.images = [ONE_PIXEL_PNG] if images is None else images
        self.calls: list[tuple[str, int]] = []

    async def generate(self, prompt: str, count: int = 1) -> list[str]:
        self.calls.append((prompt, count))
        return self.images[:count]


@pytest.fixture()
async def async_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        identity_mode="jwt",
        supabase_jwt_secret=JWT_SECRET,
        stripe_webhook_secret=WEBHOOK_SECRET,
        stripe_basic_price_id="price_basic",
        stripe_premium_price_id="price_premium",
        stripe_basic_product_id="prod_basic",
        stripe_premium_product_id="prod_premium",
        frontend_url="http://frontend.test",
        public_base_url="http://api.test",
        media_dir=str(tmp_path / "media"),
        rate_limit_per_minute=1000,
    )


@pytest.fixture()
def video_provider() -> FakeVideoProvider:
    return FakeVideoProvider()


@pytest.fixture()
def image_provider() -> FakeImageProvider:
    return FakeImageProvider()


@pytest.fixture()
def context(settings, async_engine, video_provider, image_provider):
    ctx = build_context(settings, engine=async_engine)
    ctx.video_provider = video_provider
    ctx.image_provider = image_provider
    return ctx


@pytest.fixture()
def app(context):
    return create_app(context=context)


@pytest.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
