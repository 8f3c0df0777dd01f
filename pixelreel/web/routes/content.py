"""Per-account history of generated images and videos."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from pixelreel.models.api import GeneratedImageResponse, GeneratedVideoResponse
from pixelreel.models.domain import Account
from pixelreel.web.dependencies import AppContext, get_account, get_context

router = APIRouter(prefix="/api/user", tags=["content"])


async def _images(context: AppContext, account: Account) -> list[dict[str, Any]]:
    rows = await context.media.list_images(account.id)
    return [GeneratedImageResponse.model_validate(row, from_attributes=True).model_dump(mode="json") for row in rows]


async def _videos(context: AppContext, account: Account) -> list[dict[str, Any]]:
    rows = await context.media.list_videos(account.id)
    return [GeneratedVideoResponse.model_validate(row, from_attributes=True).model_dump(mode="json") for row in rows]


@router.get("/images")
async def list_images(
    account: Account = Depends(get_account),
    context: AppContext = Depends(get_context),
) -> dict[str, list[dict[str, Any]]]:
    return {"images": await _images(context, account)}


@router.get("/videos")
async def list_videos(
    account: Account = Depends(get_account),
    context: AppContext = Depends(get_context),
) -> dict[str, list[dict[str, Any]]]:
    return {"videos": await _videos(context, account)}


@router.get("/content")
async def list_content(
    account: Account = Depends(get_account),
    context: AppContext = Depends(get_context),
) -> dict[str, list[dict[str, Any]]]:
    return {
        "images": await _images(context, account),
        "videos": await _videos(context, account),
    }
