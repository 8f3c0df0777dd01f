"""Generated media on the local filesystem, served by the app under /media."""

from __future__ import annotations

import asyncio
import pathlib  # noqa: TC003 - used at runtime for Path operations
import uuid
from urllib.parse import quote

import structlog

from pixelreel.storage.object_store import URL_TTL_SECONDS, ObjectStore

logger = structlog.get_logger(__name__)


class LocalObjectStore(ObjectStore):
    """Development store: media lives under ``base_dir`` and links never expire."""

    def __init__(self, base_dir: pathlib.Path, public_base_url: str = "/media") -> None:
        self._base = base_dir.resolve()
        self._base.mkdir(parents=True, exist_ok=True)
        self._public_base_url = public_base_url.rstrip("/")

    @property
    def base_dir(self) -> pathlib.Path:
        return self._base

    def _path_for(self, key: str) -> pathlib.Path:
        path = (self._base / key).resolve()
        if not path.is_relative_to(self._base):
            msg = f"Path traversal detected: {key}"
            raise ValueError(msg)
        return path

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        path = self._path_for(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Readers under /media never see a half-written file
            tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.part")
            tmp.write_bytes(data)
            tmp.replace(path)

        await asyncio.to_thread(_write)
        logger.debug("local_media_written", key=key, size=len(data), content_type=content_type)

    async def url_for(self, key: str, expires_in: int = URL_TTL_SECONDS) -> str:
        self._path_for(key)
        return f"{self._public_base_url}/{quote(key)}"
