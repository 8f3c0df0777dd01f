"""SQLModel database table models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    """Return current UTC time as naive datetime for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def _new_uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Entitlement and usage
# ---------------------------------------------------------------------------


class Subscription(SQLModel, table=True):
    __tablename__ = "subscriptions"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    # Not unique: historical rows are kept, the newest one is current
    account_id: str = Field(index=True)
    tier: str = Field(default="free")  # free | basic | premium
    active: bool = Field(default=True)
    status: str = Field(default="active")  # mirror of the Stripe status
    external_customer_ref: str | None = None
    external_subscription_ref: str | None = Field(default=None, index=True)
    expires_at: datetime | None = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=_utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=_utc_now, sa_type=DateTime)


class UsageCounter(SQLModel, table=True):
    __tablename__ = "usage_counters"
    __table_args__ = (
        UniqueConstraint(
            "account_id",
            "resource_kind",
            "usage_date",
            name="uq_usage_counters_account_kind_date",
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    account_id: str = Field(index=True)
    resource_kind: str  # image | video
    usage_date: str  # YYYY-MM-DD (UTC)
    count: int = Field(default=0)
    created_at: datetime = Field(default_factory=_utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=_utc_now, sa_type=DateTime)


# ---------------------------------------------------------------------------
# Generated content
# ---------------------------------------------------------------------------


class GeneratedImage(SQLModel, table=True):
    __tablename__ = "generated_images"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    account_id: str = Field(index=True)
    url: str
    source_url: str | None = None
    prompt_text: str = ""
    created_at: datetime = Field(default_factory=_utc_now, sa_type=DateTime, index=True)


class GeneratedVideo(SQLModel, table=True):
    __tablename__ = "generated_videos"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    account_id: str = Field(index=True)
    task_id: str = Field(index=True)
    url: str
    source_url: str | None = None
    mode: str = Field(default="text_to_video")  # image_to_video | text_to_video
    prompt_text: str = ""
    prompt_image: bool = Field(default=False)
    aspect_ratio: str = Field(default="16:9")
    created_at: datetime = Field(default_factory=_utc_now, sa_type=DateTime, index=True)


class VideoTask(SQLModel, table=True):
    """Submitted video generation task and the account that owns it."""

    __tablename__ = "video_tasks"

    task_id: str = Field(primary_key=True)
    account_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=_utc_now, sa_type=DateTime)
