"""Image and video generation routes, gated by the daily tier limits."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from pixelreel.exceptions import Forbidden, InvalidRequest, NotFound, StorageError
from pixelreel.models.api import ImageRequest, VideoFromImageRequest, VideoFromTextRequest
from pixelreel.models.domain import Account, Allow, Deny
from pixelreel.types import ResourceKind, VideoMode
from pixelreel.web.dependencies import AppContext, get_account, get_context

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["generation"])


async def _admit(context: AppContext, account: Account, kind: ResourceKind) -> Allow:
    decision = await context.limits.admit(account, kind)
    match decision:
        case Allow():
            return decision
        case Deny():
            raise Forbidden(
                reason=decision.reason,
                message=_deny_message(decision, kind),
                used=decision.used,
                limit=decision.limit,
                subscription={
                    "tier": str(decision.tier),
                    "active": decision.active,
                    "features": decision.features.to_api(),
                },
            )


def _deny_message(decision: Deny, kind: ResourceKind) -> str:
    if decision.limit is None:
        return "Your subscription is not active"
    return f"You have reached your daily {kind} generation limit"


def _cap_duration(requested: int | None, allow: Allow) -> int:
    cap = allow.features.max_video_length_seconds
    return min(requested or cap, cap)


@router.post("/generate-video-from-image")
async def generate_video_from_image(
    body: VideoFromImageRequest,
    account: Account = Depends(get_account),
    context: AppContext = Depends(get_context),
) -> dict[str, str]:
    if not body.image_url:
        raise InvalidRequest("No image URL provided")
    provider = context.require_video_provider()
    allow = await _admit(context, account, ResourceKind.VIDEO)

    task_id = await provider.submit(
        mode=VideoMode.IMAGE_TO_VIDEO,
        prompt=body.prompt,
        aspect_ratio=body.aspect_ratio,
        duration_seconds=_cap_duration(body.duration_seconds, allow),
        image_url=body.image_url,
    )
    await context.media.register_task(account.id, task_id)
    await context.limits.record(account, ResourceKind.VIDEO)
    return {"taskId": task_id}


@router.post("/generate-video-from-text")
async def generate_video_from_text(
    body: VideoFromTextRequest,
    account: Account = Depends(get_account),
    context: AppContext = Depends(get_context),
) -> dict[str, str]:
    if not body.prompt:
        raise InvalidRequest("No prompt provided")
    provider = context.require_video_provider()
    allow = await _admit(context, account, ResourceKind.VIDEO)

    task_id = await provider.submit(
        mode=VideoMode.TEXT_TO_VIDEO,
        prompt=body.prompt,
        aspect_ratio=body.aspect_ratio,
        duration_seconds=_cap_duration(body.duration_seconds, allow),
    )
    await context.media.register_task(account.id, task_id)
    await context.limits.record(account, ResourceKind.VIDEO)
    return {"taskId": task_id}


@router.get("/video-status/{task_id}")
async def video_status(
    task_id: str,
    account: Account = Depends(get_account),
    context: AppContext = Depends(get_context),
) -> dict[str, Any]:
    """Poll a generation task; a finished video is copied into the account's library once."""
    if await context.media.task_owner(task_id) != account.id:
        raise NotFound("Video task not found")
    provider = context.require_video_provider()
    task = await provider.status(task_id)
    if not task.succeeded or task.output_url is None:
        return {"status": task.status, "videoUrl": task.output_url}

    mode = VideoMode.IMAGE_TO_VIDEO if task.mode == VideoMode.IMAGE_TO_VIDEO else VideoMode.TEXT_TO_VIDEO
    try:
        video = await context.media.store_video(
            account.id,
            task_id=task.task_id,
            source_url=task.output_url,
            mode=str(mode),
            prompt=task.prompt,
            prompt_image=bool(task.image_url),
            aspect_ratio=task.aspect_ratio,
        )
    except StorageError:
        return {"status": task.status, "videoUrl": task.output_url}
    return {"status": task.status, "videoUrl": video.url, "originalUrl": task.output_url}


@router.post("/generate-image")
async def generate_image(
    body: ImageRequest,
    account: Account = Depends(get_account),
    context: AppContext = Depends(get_context),
) -> dict[str, list[str]]:
    if not body.prompt:
        raise InvalidRequest("No prompt provided")
    provider = context.require_image_provider()
    await _admit(context, account, ResourceKind.IMAGE)

    # One image per request; the ledger counts requests
    sources = (await provider.generate(body.prompt, count=1))[:1]
    if not sources:
        return {"images": []}
    await context.limits.record(account, ResourceKind.IMAGE)

    images: list[str] = []
    for source in sources:
        try:
            stored = await context.media.store_image(account.id, source, body.prompt)
        except StorageError:
            images.append(source)
            continue
        images.append(stored.url)
    logger.info("images_generated", account_id=account.id, count=len(images))
    return {"images": images}
