"""Enums and type aliases for PixelReel."""

from enum import StrEnum


class Tier(StrEnum):
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"


class ResourceKind(StrEnum):
    IMAGE = "image"
    VIDEO = "video"


class VideoMode(StrEnum):
    IMAGE_TO_VIDEO = "image_to_video"
    TEXT_TO_VIDEO = "text_to_video"


class IdentityMode(StrEnum):
    REMOTE = "remote"
    JWT = "jwt"


# Provider statuses that count as an active entitlement
ACTIVE_STATUSES = frozenset({"active", "trialing"})
