"""API request/response schemas for FastAPI endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AspectRatio = Literal["16:9", "9:16"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class VideoFromImageRequest(_CamelModel):
    image_url: str = Field(default="", alias="imageUrl")
    prompt: str = ""
    aspect_ratio: AspectRatio = Field(default="16:9", alias="aspectRatio")
    duration_seconds: int | None = Field(default=None, alias="durationSeconds", ge=1)


class VideoFromTextRequest(_CamelModel):
    prompt: str = ""
    aspect_ratio: AspectRatio = Field(default="16:9", alias="aspectRatio")
    duration_seconds: int | None = Field(default=None, alias="durationSeconds", ge=1)


class ImageRequest(_CamelModel):
    prompt: str = ""


class CheckoutRequest(_CamelModel):
    price_id: str = Field(default="", alias="priceId")


class GeneratedImageResponse(BaseModel):
    id: str
    url: str
    prompt_text: str
    created_at: datetime


class GeneratedVideoResponse(BaseModel):
    id: str
    task_id: str
    url: str
    mode: str
    prompt_text: str
    prompt_image: bool
    aspect_ratio: str
    created_at: datetime
