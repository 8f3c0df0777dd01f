"""Google Imagen image generation provider (Generative Language API)."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from pixelreel.exceptions import UpstreamFailure
from pixelreel.generation.provider import ImageProviderBase

logger = structlog.get_logger(__name__)


class ImagenProvider(ImageProviderBase):
    """Calls the ``:predict`` endpoint and returns base64 data URLs."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com",
        model: str = "imagen-3.0-generate-002",
        timeout: float = 60.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout

    async def generate(self, prompt: str, count: int = 1) -> list[str]:
        payload: dict[str, Any] = {
            "instances": [{"prompt": prompt}],
            "parameters": {"sampleCount": count},
        }
        url = f"{self._base_url}/v1beta/models/{self._model}:predict"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, params={"key": self._api_key}, json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as exc:
            # Do not log the URL: it carries the API key
            logger.warning("imagen_request_failed", model=self._model, error=type(exc).__name__)
            msg = "Image generation request failed"
            raise UpstreamFailure(msg) from exc
        except ValueError as exc:
            raise UpstreamFailure("Image provider returned invalid JSON") from exc

        images = [
            f"data:{pred.get('mimeType', 'image/png')};base64,{pred['bytesBase64Encoded']}"
            for pred in data.get("predictions", [])
            if pred.get("bytesBase64Encoded")
        ]
        logger.info("imagen_generated", model=self._model, count=len(images))
        return images
