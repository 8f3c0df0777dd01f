"""Unit tests for the Runway and Imagen HTTP providers."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from pixelreel.exceptions import UpstreamFailure
from pixelreel.generation.imagen import ImagenProvider
from pixelreel.generation.runway import RunwayProvider
from pixelreel.types import VideoMode

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_mock_httpx_response(json_data: object) -> MagicMock:
    resp = MagicMock()
    resp.raise_for_status = MagicMock()
    resp.json.return_value = json_data
    return resp


def _patch_httpx_client(module: str, **methods: AsyncMock) -> patch:
    """Patch httpx.AsyncClient in the given provider module."""
    mock_client = AsyncMock()
    for name, method in methods.items():
        setattr(mock_client, name, method)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return patch(f"pixelreel.generation.{module}.httpx.AsyncClient", return_value=mock_client)


# ---------------------------------------------------------------------------
# Runway
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestRunwayProvider:
    def test_trailing_slash_stripped(self) -> None:
        assert RunwayProvider("key", base_url="https://runway.test/")._base_url == "https://runway.test"

    @pytest.mark.asyncio
    async def test_submit_image_to_video(self) -> None:
        request = AsyncMock(return_value=_make_mock_httpx_response({"task_id": "t-1"}))
        with _patch_httpx_client("runway", request=request):
            provider = RunwayProvider("key", base_url="https://runway.test")
            task_id = await provider.submit(
                VideoMode.IMAGE_TO_VIDEO, "waves", "9:16", 5, image_url="https://img/1.png"
            )

        assert task_id == "t-1"
        method, url = request.call_args.args
        assert (method, url) == ("POST", "https://runway.test/v1/generationTasks")
        assert request.call_args.kwargs["headers"] == {"Authorization": "Bearer key"}
        assert request.call_args.kwargs["json"] == {
            "model": "gen4_turbo",
            "prompt": "waves",
            "mode": "image_to_video",
            "aspect_ratio": "9:16",
            "duration": 5,
            "image_url": "https://img/1.png",
        }

    @pytest.mark.asyncio
    async def test_submit_accepts_id_field(self) -> None:
        request = AsyncMock(return_value=_make_mock_httpx_response({"id": "t-2"}))
        with _patch_httpx_client("runway", request=request):
            task_id = await RunwayProvider("key").submit(VideoMode.TEXT_TO_VIDEO, "cat", "16:9", 5)
        assert task_id == "t-2"
        assert "image_url" not in request.call_args.kwargs["json"]

    @pytest.mark.asyncio
    async def test_submit_without_task_id_fails(self) -> None:
        request = AsyncMock(return_value=_make_mock_httpx_response({"status": "queued"}))
        with _patch_httpx_client("runway", request=request), pytest.raises(UpstreamFailure):
            await RunwayProvider("key").submit(VideoMode.TEXT_TO_VIDEO, "cat", "16:9", 5)

    @pytest.mark.asyncio
    async def test_transport_error_is_upstream_failure(self) -> None:
        request = AsyncMock(side_effect=httpx.ConnectTimeout("timeout"))
        with _patch_httpx_client("runway", request=request), pytest.raises(UpstreamFailure):
            await RunwayProvider("key").status("t-1")

    @pytest.mark.asyncio
    async def test_status_succeeded_with_output_list(self) -> None:
        payload = {
            "status": "SUCCEEDED",
            "output": ["https://cdn/video.mp4"],
            "input": {
                "prompt": "waves",
                "image_url": "https://img/1.png",
                "mode": "image_to_video",
                "aspect_ratio": "9:16",
            },
        }
        request = AsyncMock(return_value=_make_mock_httpx_response(payload))
        with _patch_httpx_client("runway", request=request):
            status = await RunwayProvider("key").status("t-1")

        assert status.succeeded
        assert status.output_url == "https://cdn/video.mp4"
        assert status.mode == VideoMode.IMAGE_TO_VIDEO
        assert status.prompt == "waves"
        assert status.aspect_ratio == "9:16"

    @pytest.mark.asyncio
    async def test_status_pending_without_output(self) -> None:
        request = AsyncMock(return_value=_make_mock_httpx_response({"status": "RUNNING"}))
        with _patch_httpx_client("runway", request=request):
            status = await RunwayProvider("key").status("t-1")
        assert not status.succeeded
        assert status.output_url is None
        assert status.mode == VideoMode.TEXT_TO_VIDEO


# ---------------------------------------------------------------------------
# Imagen
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestImagenProvider:
    @pytest.mark.asyncio
    async def test_generate_returns_data_urls(self) -> None:
        payload = {
            "predictions": [
                {"bytesBase64Encoded": "AAAA", "mimeType": "image/jpeg"},
                {"bytesBase64Encoded": "BBBB"},
                {"raiFilteredReason": "blocked"},
            ]
        }
        post = AsyncMock(return_value=_make_mock_httpx_response(payload))
        with _patch_httpx_client("imagen", post=post):
            provider = ImagenProvider("gkey", base_url="https://gl.test", model="imagen-x")
            images = await provider.generate("a fox", count=3)

        assert images == ["data:image/jpeg;base64,AAAA", "data:image/png;base64,BBBB"]
        assert post.call_args.args[0] == "https://gl.test/v1beta/models/imagen-x:predict"
        assert post.call_args.kwargs["params"] == {"key": "gkey"}
        assert post.call_args.kwargs["json"]["parameters"] == {"sampleCount": 3}

    @pytest.mark.asyncio
    async def test_http_error_is_upstream_failure(self) -> None:
        resp = _make_mock_httpx_response({})
        resp.raise_for_status.side_effect = httpx.HTTPStatusError(
            "400", request=MagicMock(), response=MagicMock()
        )
        post = AsyncMock(return_value=resp)
        with _patch_httpx_client("imagen", post=post), pytest.raises(UpstreamFailure):
            await ImagenProvider("gkey").generate("a fox")
