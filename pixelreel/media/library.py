"""Persist generated media to object storage and record it per account."""

from __future__ import annotations

import base64
import binascii
import mimetypes
import uuid
from typing import TYPE_CHECKING

import httpx
import structlog

from pixelreel.exceptions import StorageError
from pixelreel.models.database import GeneratedImage, GeneratedVideo

if TYPE_CHECKING:
    from pixelreel.storage.object_store import ObjectStore
    from pixelreel.storage.repositories.media import MediaRepository

logger = structlog.get_logger(__name__)

_DOWNLOAD_TIMEOUT = 60.0


def decode_data_url(data_url: str) -> tuple[bytes, str]:
    """Split a ``data:<mime>;base64,<payload>`` URL into bytes and content type."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        msg = "Unsupported data URL"
        raise ValueError(msg)
    content_type = header[len("data:") : -len(";base64")] or "application/octet-stream"
    try:
        return base64.b64decode(payload, validate=True), content_type
    except binascii.Error as exc:
        msg = "Invalid base64 payload in data URL"
        raise ValueError(msg) from exc


def _extension(content_type: str, default: str) -> str:
    ext = mimetypes.guess_extension(content_type.split(";")[0].strip())
    return ext.lstrip(".") if ext else default


class MediaLibrary:
    """Uploads generated media and keeps the account's content history."""

    def __init__(self, store: ObjectStore, repo: MediaRepository) -> None:
        self._store = store
        self._repo = repo

    async def store_image(self, account_id: str, source: str, prompt: str) -> GeneratedImage:
        """Upload an image given as a data URL or HTTP(S) URL and record it."""
        try:
            if source.startswith("data:"):
                data, content_type = decode_data_url(source)
                source_url = None
            else:
                data, content_type = await self._download(source)
                source_url = source
            key = f"images/{account_id}/{uuid.uuid4()}.{_extension(content_type, 'png')}"
            await self._store.put(key, data, content_type=content_type)
            url = await self._store.url_for(key)
        except Exception as exc:
            # botocore raises outside the httpx/OSError hierarchy
            logger.warning("image_store_failed", account_id=account_id, error=str(exc))
            msg = "Failed to store generated image"
            raise StorageError(msg) from exc

        return await self._repo.add_image(
            GeneratedImage(account_id=account_id, url=url, source_url=source_url, prompt_text=prompt)
        )

    async def store_video(
        self,
        account_id: str,
        task_id: str,
        source_url: str,
        mode: str,
        prompt: str = "",
        prompt_image: bool = False,
        aspect_ratio: str = "16:9",
    ) -> GeneratedVideo:
        """Upload a finished video once per task and record it.

        Repeated polls of the same task return the existing record.
        """
        existing = await self._repo.get_video_by_task(account_id, task_id)
        if existing is not None:
            return existing

        try:
            data, content_type = await self._download(source_url)
            key = f"videos/{account_id}/{uuid.uuid4()}.{_extension(content_type, 'mp4')}"
            await self._store.put(key, data, content_type=content_type)
            url = await self._store.url_for(key)
        except Exception as exc:
            logger.warning(
                "video_store_failed", account_id=account_id, task_id=task_id, error=str(exc)
            )
            msg = "Failed to store generated video"
            raise StorageError(msg) from exc

        return await self._repo.add_video(
            GeneratedVideo(
                account_id=account_id,
                task_id=task_id,
                url=url,
                source_url=source_url,
                mode=mode,
                prompt_text=prompt,
                prompt_image=prompt_image,
                aspect_ratio=aspect_ratio,
            )
        )

    async def register_task(self, account_id: str, task_id: str) -> None:
        await self._repo.add_task(account_id, task_id)

    async def task_owner(self, task_id: str) -> str | None:
        return await self._repo.get_task_owner(task_id)

    async def list_images(self, account_id: str) -> list[GeneratedImage]:
        return await self._repo.list_images(account_id)

    async def list_videos(self, account_id: str) -> list[GeneratedVideo]:
        return await self._repo.list_videos(account_id)

    @staticmethod
    async def _download(url: str) -> tuple[bytes, str]:
        async with httpx.AsyncClient(timeout=_DOWNLOAD_TIMEOUT, follow_redirects=True) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            content_type = resp.headers.get("content-type", "application/octet-stream")
            return resp.content, content_type
