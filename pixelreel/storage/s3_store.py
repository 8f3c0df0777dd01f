"""Generated media on S3-compatible storage via aiobotocore."""

from __future__ import annotations

from typing import Any

import structlog
from aiobotocore.config import AioConfig
from aiobotocore.session import get_session

from pixelreel.storage.object_store import URL_TTL_SECONDS, ObjectStore

logger = structlog.get_logger(__name__)

# Generated media never changes once written
_CACHE_CONTROL = "public, max-age=31536000, immutable"


class S3ObjectStore(ObjectStore):
    """Uploads generated images and videos and hands out presigned download links.

    Objects stay private; clients only ever see SigV4 presigned URLs.
    """

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        region: str = "us-east-1",
    ) -> None:
        self._bucket = bucket
        self._session = get_session()
        self._client_kwargs: dict[str, Any] = {
            "region_name": region,
            "config": AioConfig(signature_version="s3v4"),
        }
        if endpoint_url:
            self._client_kwargs["endpoint_url"] = endpoint_url
        if access_key_id:
            self._client_kwargs["aws_access_key_id"] = access_key_id
        if secret_access_key:
            self._client_kwargs["aws_secret_access_key"] = secret_access_key

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        async with self._session.create_client("s3", **self._client_kwargs) as client:
            await client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl=_CACHE_CONTROL,
            )
        logger.info("media_uploaded", key=key, size=len(data), content_type=content_type)

    async def url_for(self, key: str, expires_in: int = URL_TTL_SECONDS) -> str:
        """Presigned GET URL; S3 caps SigV4 expiry at 7 days."""
        async with self._session.create_client("s3", **self._client_kwargs) as client:
            url: str = await client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=min(expires_in, URL_TTL_SECONDS),
            )
        return url
