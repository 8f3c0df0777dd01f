"""Bearer-token identity resolution against Supabase Auth."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx
import jwt
import structlog

from pixelreel.exceptions import ServiceUnavailable, Unauthorized
from pixelreel.models.domain import Account

logger = structlog.get_logger(__name__)

_BEARER_PREFIX = "Bearer "


def parse_bearer(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Raises Unauthorized for a missing or malformed header.
    """
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise Unauthorized("Missing or invalid authorization header")
    token = authorization[len(_BEARER_PREFIX) :].strip()
    if not token:
        raise Unauthorized("Missing or invalid authorization header")
    return token


class IdentityVerifier(ABC):
    """Turns a bearer token into a verified account."""

    @abstractmethod
    async def verify(self, token: str) -> Account:
        """Raise Unauthorized for rejected tokens, ServiceUnavailable for provider outages."""


class SupabaseIdentityVerifier(IdentityVerifier):
    """Asks the Supabase Auth server who the token belongs to (``GET /auth/v1/user``)."""

    def __init__(self, supabase_url: str, anon_key: str, timeout: float = 10.0) -> None:
        self._user_url = f"{supabase_url.rstrip('/')}/auth/v1/user"
        self._anon_key = anon_key
        self._timeout = timeout

    async def verify(self, token: str) -> Account:
        headers = {"apikey": self._anon_key, "Authorization": f"Bearer {token}"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(self._user_url, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("identity_provider_unreachable", error=str(exc))
            raise ServiceUnavailable("Authentication failed") from exc

        if resp.status_code >= 500:
            logger.warning("identity_provider_error", status=resp.status_code)
            raise ServiceUnavailable("Authentication failed")
        if resp.status_code != 200:
            logger.info("identity_token_rejected", status=resp.status_code)
            raise Unauthorized("Invalid token")

        try:
            user: dict[str, Any] = resp.json()
        except ValueError as exc:
            raise ServiceUnavailable("Authentication failed") from exc
        if not user.get("id"):
            raise Unauthorized("Invalid token")
        return Account(id=str(user["id"]), email=user.get("email"))


class JwtIdentityVerifier(IdentityVerifier):
    """Verifies Supabase access tokens locally with the project's HS256 JWT secret."""

    def __init__(self, secret: str, audience: str = "authenticated") -> None:
        self._secret = secret
        self._audience = audience

    async def verify(self, token: str) -> Account:
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=["HS256"],
                audience=self._audience,
                options={"require": ["sub", "exp"]},
            )
        except jwt.PyJWTError as exc:
            logger.info("identity_jwt_invalid", error=str(exc))
            raise Unauthorized("Invalid token") from exc
        return Account(id=str(payload["sub"]), email=payload.get("email"))


class IdentityResolver:
    """Rejects malformed headers before delegating to the configured verifier."""

    def __init__(self, verifier: IdentityVerifier) -> None:
        self._verifier = verifier

    async def resolve(self, authorization: str | None) -> Account:
        token = parse_bearer(authorization)
        return await self._verifier.verify(token)
