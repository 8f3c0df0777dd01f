"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from pixelreel import __version__
from pixelreel.billing.plans import validate_feature_table
from pixelreel.config.logging import setup_logging
from pixelreel.config.settings import get_settings
from pixelreel.exceptions import (
    ConfigError,
    Forbidden,
    InvalidRequest,
    InvalidSignature,
    NotFound,
    PixelReelError,
    StorageError,
    Unauthorized,
    UpstreamFailure,
)
from pixelreel.storage.database import init_db
from pixelreel.storage.local_store import LocalObjectStore
from pixelreel.web.dependencies import AppContext, build_context, get_context
from pixelreel.web.health import check_health
from pixelreel.web.middleware import RateLimitMiddleware, RequestIDMiddleware
from pixelreel.web.routes.billing import router as billing_router
from pixelreel.web.routes.content import router as content_router
from pixelreel.web.routes.generation import router as generation_router
from pixelreel.web.routes.subscription import router as subscription_router

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = structlog.get_logger(__name__)

# Client-facing messages for failures whose detail stays in the logs
_OPAQUE_MESSAGES: dict[type[PixelReelError], str] = {
    UpstreamFailure: "Upstream service request failed",
    StorageError: "Failed to store media",
    ConfigError: "Server is not configured correctly",
}


def _error_response(exc: PixelReelError) -> JSONResponse:
    match exc:
        case Unauthorized():
            return JSONResponse({"error": str(exc)}, status_code=401)
        case Forbidden():
            return JSONResponse(
                {
                    "error": str(exc),
                    "reason": exc.reason,
                    "subscription": exc.subscription,
                    "usage": {"used": exc.used, "limit": exc.limit},
                },
                status_code=403,
            )
        case NotFound():
            return JSONResponse({"error": str(exc)}, status_code=404)
        case InvalidSignature() | InvalidRequest():
            return JSONResponse({"error": str(exc)}, status_code=400)
        case _:
            message = next(
                (msg for kind, msg in _OPAQUE_MESSAGES.items() if isinstance(exc, kind)),
                "Internal server error",
            )
            return JSONResponse({"error": message}, status_code=500)


def create_app(context: AppContext | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    A prebuilt context can be passed in; otherwise one is wired from settings.
    """
    settings = context.settings if context is not None else get_settings()
    setup_logging(log_level=settings.log_level, json_output=not settings.debug)
    validate_feature_table()
    context = context or build_context(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.auto_create_tables:
            await init_db(context.engine)
            logger.info("database_tables_created")
        yield
        await context.aclose()

    app = FastAPI(
        title="PixelReel",
        description="AI image and video generation with subscription tiers",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    @app.exception_handler(PixelReelError)
    async def pixelreel_error_handler(request: Request, exc: PixelReelError) -> JSONResponse:
        if isinstance(exc, UpstreamFailure | StorageError | ConfigError):
            logger.error(
                "request_failed",
                path=request.url.path,
                error_type=type(exc).__name__,
                error=str(exc),
            )
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("request_invalid", path=request.url.path, errors=len(exc.errors()))
        return JSONResponse({"error": "Invalid request body"}, status_code=400)

    # Middleware: last added runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID", "Stripe-Signature"],
    )
    app.add_middleware(
        RateLimitMiddleware, max_requests=settings.rate_limit_per_minute, window_seconds=60
    )
    app.add_middleware(RequestIDMiddleware)

    @app.get("/api/health")
    async def health_check(ctx: AppContext = Depends(get_context)) -> dict[str, object]:
        return await check_health(ctx.engine)

    for router in (generation_router, subscription_router, billing_router, content_router):
        app.include_router(router)

    if isinstance(context.object_store, LocalObjectStore):
        app.mount(
            "/media",
            StaticFiles(directory=str(context.object_store.base_dir)),
            name="media",
        )

    logger.info("app_created")
    return app
