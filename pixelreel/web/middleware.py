"""FastAPI middleware: request ID binding and per-IP rate limiting."""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

logger = structlog.get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Binds a request id into the log context and echoes it as X-Request-ID."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        )
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory sliding-window limiter keyed by client IP.

    Limits requests to `max_requests` within `window_seconds` for paths under
    `prefix`. Stripe webhook deliveries are exempt so retries are never dropped.
    """

    def __init__(
        self,
        app: object,
        max_requests: int = 60,
        window_seconds: int = 60,
        prefix: str = "/api/",
        exempt_paths: frozenset[str] = frozenset({"/api/webhook", "/api/health"}),
    ) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._max_requests = max_requests
        self._window = window_seconds
        self._prefix = prefix
        self._exempt = exempt_paths
        self._hits: dict[str, list[float]] = {}
        self._last_sweep = time.monotonic()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not path.startswith(self._prefix) or path in self._exempt:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()

        self._sweep(now)
        hits = [t for t in self._hits.get(client_ip, ()) if now - t < self._window]

        if len(hits) >= self._max_requests:
            self._hits[client_ip] = hits
            logger.warning("rate_limit_exceeded", ip=client_ip, path=path)
            return JSONResponse(
                {"error": "Too many requests, please try again later."},
                status_code=429,
                headers={"Retry-After": str(self._window)},
            )

        hits.append(now)
        self._hits[client_ip] = hits
        return await call_next(request)

    def _sweep(self, now: float) -> None:
        """Forget clients with no hits inside the window, at most once per window."""
        if now - self._last_sweep < self._window:
            return
        self._last_sweep = now
        idle = [
            ip for ip, hits in self._hits.items() if not hits or now - hits[-1] >= self._window
        ]
        for ip in idle:
            del self._hits[ip]
