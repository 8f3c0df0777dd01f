"""Runway video generation provider using its task HTTP API."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from pixelreel.exceptions import UpstreamFailure
from pixelreel.generation.provider import VideoProviderBase
from pixelreel.models.domain import VideoTaskStatus
from pixelreel.types import VideoMode

logger = structlog.get_logger(__name__)


class RunwayProvider(VideoProviderBase):
    """Submits and polls ``generationTasks`` on the Runway API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.runwayml.com",
        model: str = "gen4_turbo",
        timeout: float = 60.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout

    async def submit(
        self,
        mode: VideoMode,
        prompt: str,
        aspect_ratio: str,
        duration_seconds: int,
        image_url: str | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self._model,
            "prompt": prompt,
            "mode": str(mode),
            "aspect_ratio": aspect_ratio,
            "duration": duration_seconds,
        }
        if image_url:
            payload["image_url"] = image_url

        data = await self._request("POST", "/v1/generationTasks", json=payload)
        task_id = data.get("task_id") or data.get("id")
        if not task_id:
            logger.error("runway_missing_task_id", mode=str(mode))
            msg = "Runway response did not include a task id"
            raise UpstreamFailure(msg)
        logger.info("runway_task_submitted", task_id=task_id, mode=str(mode))
        return str(task_id)

    async def status(self, task_id: str) -> VideoTaskStatus:
        data = await self._request("GET", f"/v1/generationTasks/{task_id}")
        output = data.get("output")
        if isinstance(output, list):
            output_url = output[0] if output else None
        elif isinstance(output, str):
            output_url = output
        else:
            output_url = None

        task_input = data.get("input") or {}
        mode = task_input.get("mode")
        return VideoTaskStatus(
            task_id=task_id,
            status=str(data.get("status", "UNKNOWN")),
            output_url=output_url,
            prompt=task_input.get("prompt", ""),
            image_url=task_input.get("image_url") or None,
            mode=(
                VideoMode.IMAGE_TO_VIDEO
                if mode == VideoMode.IMAGE_TO_VIDEO
                else VideoMode.TEXT_TO_VIDEO
            ),
            aspect_ratio=task_input.get("aspect_ratio", "16:9"),
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(
                    method, f"{self._base_url}{path}", headers=headers, **kwargs
                )
                resp.raise_for_status()
                data: dict[str, Any] = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("runway_request_failed", path=path, error=str(exc))
            msg = f"Runway request failed: {exc}"
            raise UpstreamFailure(msg) from exc
        except ValueError as exc:
            logger.warning("runway_invalid_json", path=path)
            raise UpstreamFailure("Runway returned invalid JSON") from exc
        return data
