"""Generated media records per account."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from pixelreel.models.database import GeneratedImage, GeneratedVideo, VideoTask

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)


class MediaRepository:
    """Insert and list generated images and videos per account."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def add_image(self, image: GeneratedImage) -> GeneratedImage:
        async with AsyncSession(self._engine) as session:
            session.add(image)
            await session.commit()
            await session.refresh(image)
        logger.info("generated_image_recorded", account_id=image.account_id, image_id=image.id)
        return image

    async def add_video(self, video: GeneratedVideo) -> GeneratedVideo:
        async with AsyncSession(self._engine) as session:
            session.add(video)
            await session.commit()
            await session.refresh(video)
        logger.info(
            "generated_video_recorded",
            account_id=video.account_id,
            video_id=video.id,
            task_id=video.task_id,
        )
        return video

    async def add_task(self, account_id: str, task_id: str) -> None:
        async with AsyncSession(self._engine) as session:
            if await session.get(VideoTask, task_id) is None:
                session.add(VideoTask(task_id=task_id, account_id=account_id))
                await session.commit()
        logger.info("video_task_recorded", account_id=account_id, task_id=task_id)

    async def get_task_owner(self, task_id: str) -> str | None:
        async with AsyncSession(self._engine) as session:
            task = await session.get(VideoTask, task_id)
            return task.account_id if task is not None else None

    async def get_video_by_task(self, account_id: str, task_id: str) -> GeneratedVideo | None:
        async with AsyncSession(self._engine) as session:
            stmt = select(GeneratedVideo).where(
                col(GeneratedVideo.account_id) == account_id,
                col(GeneratedVideo.task_id) == task_id,
            )
            result = await session.execute(stmt)
            return result.scalars().first()

    async def list_images(self, account_id: str) -> list[GeneratedImage]:
        async with AsyncSession(self._engine) as session:
            stmt = (
                select(GeneratedImage)
                .where(col(GeneratedImage.account_id) == account_id)
                .order_by(col(GeneratedImage.created_at).desc())
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def list_videos(self, account_id: str) -> list[GeneratedVideo]:
        async with AsyncSession(self._engine) as session:
            stmt = (
                select(GeneratedVideo)
                .where(col(GeneratedVideo.account_id) == account_id)
                .order_by(col(GeneratedVideo.created_at).desc())
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())
