"""Abstract object store interface for generated media."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pixelreel.config.settings import Settings

# Presigned download links stay valid for 7 days
URL_TTL_SECONDS = 7 * 24 * 3600


class ObjectStore(ABC):
    """Abstract base class for media blob storage."""

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        """Store binary data at the given key."""

    @abstractmethod
    async def url_for(self, key: str, expires_in: int = URL_TTL_SECONDS) -> str:
        """Return a URL clients can download the object from."""


def create_object_store(settings: Settings) -> ObjectStore:
    """Factory: create the appropriate ObjectStore based on settings."""
    if settings.use_s3:
        from pixelreel.storage.s3_store import S3ObjectStore

        return S3ObjectStore(
            bucket=settings.s3_bucket,
            endpoint_url=settings.s3_endpoint_url,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            region=settings.s3_region,
        )

    from pathlib import Path

    from pixelreel.storage.local_store import LocalObjectStore

    return LocalObjectStore(
        base_dir=Path(settings.media_dir).expanduser(),
        public_base_url=f"{settings.public_base_url.rstrip('/')}/media",
    )
