"""Abstract generation provider interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pixelreel.models.domain import VideoTaskStatus
    from pixelreel.types import VideoMode


class VideoProviderBase(ABC):
    """Abstract base for task-based video generation APIs."""

    @abstractmethod
    async def submit(
        self,
        mode: VideoMode,
        prompt: str,
        aspect_ratio: str,
        duration_seconds: int,
        image_url: str | None = None,
    ) -> str:
        """Submit a generation job and return the provider task id."""

    @abstractmethod
    async def status(self, task_id: str) -> VideoTaskStatus:
        """Poll a previously submitted task."""


class ImageProviderBase(ABC):
    """Abstract base for synchronous image generation APIs."""

    @abstractmethod
    async def generate(self, prompt: str, count: int = 1) -> list[str]:
        """Generate images and return them as data URLs or HTTP(S) URLs."""
