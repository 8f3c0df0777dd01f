"""Inter-module data contracts (not persisted directly)."""

from __future__ import annotations

from dataclasses import dataclass

from pixelreel.billing.plans import TierFeatures
from pixelreel.types import Tier


@dataclass(frozen=True, slots=True)
class Account:
    """Verified identity-provider account."""

    id: str
    email: str | None = None


@dataclass(frozen=True, slots=True)
class Allow:
    """Admission granted; carries the feature snapshot used to cap the request."""

    tier: Tier
    features: TierFeatures


@dataclass(frozen=True, slots=True)
class Deny:
    """Admission refused, with numeric usage for client display."""

    reason: str
    tier: Tier
    active: bool
    features: TierFeatures
    used: int | None = None
    limit: int | None = None


Decision = Allow | Deny


@dataclass(frozen=True, slots=True)
class VideoTaskStatus:
    """Polled state of a video generation task."""

    task_id: str
    status: str
    output_url: str | None = None
    prompt: str = ""
    image_url: str | None = None
    mode: str = "text_to_video"
    aspect_ratio: str = "16:9"

    @property
    def succeeded(self) -> bool:
        return self.status == "SUCCEEDED" and bool(self.output_url)
