"""Application context and FastAPI dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from fastapi import Depends, Request

from pixelreel.billing.gateway import StripeGateway
from pixelreel.billing.limits import LimitEnforcer
from pixelreel.billing.sync import SubscriptionSynchronizer
from pixelreel.exceptions import UpstreamFailure
from pixelreel.generation.imagen import ImagenProvider
from pixelreel.generation.runway import RunwayProvider
from pixelreel.media.library import MediaLibrary
from pixelreel.models.domain import Account
from pixelreel.storage.database import create_engine
from pixelreel.storage.object_store import ObjectStore, create_object_store
from pixelreel.storage.repositories.media import MediaRepository
from pixelreel.storage.repositories.subscriptions import EntitlementStore
from pixelreel.storage.repositories.usage import UsageLedger
from pixelreel.types import IdentityMode
from pixelreel.web.auth.identity import (
    IdentityResolver,
    IdentityVerifier,
    JwtIdentityVerifier,
    SupabaseIdentityVerifier,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from pixelreel.config.settings import Settings
    from pixelreel.generation.provider import ImageProviderBase, VideoProviderBase

logger = structlog.get_logger(__name__)


@dataclass
class AppContext:
    """Process-wide collaborators, built once in the app lifespan.

    Generation providers are None when their API key is not configured.
    """

    settings: Settings
    engine: AsyncEngine
    entitlements: EntitlementStore
    ledger: UsageLedger
    limits: LimitEnforcer
    gateway: StripeGateway
    synchronizer: SubscriptionSynchronizer
    identity: IdentityResolver
    object_store: ObjectStore
    media: MediaLibrary
    video_provider: VideoProviderBase | None = None
    image_provider: ImageProviderBase | None = None

    def require_video_provider(self) -> VideoProviderBase:
        if self.video_provider is None:
            logger.error("video_provider_not_configured")
            msg = "Video generation is not configured"
            raise UpstreamFailure(msg)
        return self.video_provider

    def require_image_provider(self) -> ImageProviderBase:
        if self.image_provider is None:
            logger.error("image_provider_not_configured")
            msg = "Image generation is not configured"
            raise UpstreamFailure(msg)
        return self.image_provider

    async def aclose(self) -> None:
        await self.engine.dispose()
        logger.info("app_context_closed")


def _create_identity_verifier(settings: Settings) -> IdentityVerifier:
    if settings.identity_mode == IdentityMode.JWT:
        return JwtIdentityVerifier(secret=settings.supabase_jwt_secret or "")
    return SupabaseIdentityVerifier(
        supabase_url=settings.supabase_url,
        anon_key=settings.supabase_anon_key,
    )


def build_context(settings: Settings, engine: AsyncEngine | None = None) -> AppContext:
    """Wire every collaborator from settings."""
    engine = engine or create_engine(settings)
    entitlements = EntitlementStore(engine)
    ledger = UsageLedger(engine)
    gateway = StripeGateway(
        secret_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
    )
    object_store = create_object_store(settings)

    video_provider = (
        RunwayProvider(api_key=settings.runway_api_key, base_url=settings.runway_base_url)
        if settings.runway_api_key
        else None
    )
    image_provider = (
        ImagenProvider(
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url,
            model=settings.gemini_image_model,
        )
        if settings.gemini_api_key
        else None
    )

    context = AppContext(
        settings=settings,
        engine=engine,
        entitlements=entitlements,
        ledger=ledger,
        limits=LimitEnforcer(entitlements, ledger),
        gateway=gateway,
        synchronizer=SubscriptionSynchronizer(gateway, entitlements, settings.price_tiers),
        identity=IdentityResolver(_create_identity_verifier(settings)),
        object_store=object_store,
        media=MediaLibrary(object_store, MediaRepository(engine)),
        video_provider=video_provider,
        image_provider=image_provider,
    )
    logger.info(
        "app_context_built",
        identity_mode=settings.identity_mode,
        s3=settings.use_s3,
        video_provider=video_provider is not None,
        image_provider=image_provider is not None,
        stripe=gateway.configured,
    )
    return context


def get_context(request: Request) -> AppContext:
    context: AppContext = request.app.state.context
    return context


async def get_account(
    request: Request,
    context: AppContext = Depends(get_context),
) -> Account:
    """Resolve the bearer token on the request to a verified account."""
    account = await context.identity.resolve(request.headers.get("authorization"))
    structlog.contextvars.bind_contextvars(account_id=account.id)
    return account
