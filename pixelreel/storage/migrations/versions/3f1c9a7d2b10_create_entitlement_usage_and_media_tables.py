"""create entitlement, usage and media tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel.sql.sqltypes
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create subscriptions, usage counters and generated media tables."""
    op.create_table(
        "subscriptions",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("account_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column(
            "tier", sqlmodel.sql.sqltypes.AutoString(), nullable=False, server_default="free"
        ),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "status", sqlmodel.sql.sqltypes.AutoString(), nullable=False, server_default="active"
        ),
        sa.Column("external_customer_ref", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("external_subscription_ref", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_subscriptions_account_id"), "subscriptions", ["account_id"])
    op.create_index(
        op.f("ix_subscriptions_external_subscription_ref"),
        "subscriptions",
        ["external_subscription_ref"],
    )

    op.create_table(
        "usage_counters",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("account_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("resource_kind", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("usage_date", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        # Target of the ON CONFLICT increment
        sa.UniqueConstraint(
            "account_id",
            "resource_kind",
            "usage_date",
            name="uq_usage_counters_account_kind_date",
        ),
    )
    op.create_index(op.f("ix_usage_counters_account_id"), "usage_counters", ["account_id"])

    op.create_table(
        "generated_images",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("account_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("url", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("source_url", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("prompt_text", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_generated_images_account_id"), "generated_images", ["account_id"])
    op.create_index(op.f("ix_generated_images_created_at"), "generated_images", ["created_at"])

    op.create_table(
        "generated_videos",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("account_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("task_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("url", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("source_url", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column(
            "mode",
            sqlmodel.sql.sqltypes.AutoString(),
            nullable=False,
            server_default="text_to_video",
        ),
        sa.Column("prompt_text", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("prompt_image", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "aspect_ratio", sqlmodel.sql.sqltypes.AutoString(), nullable=False, server_default="16:9"
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_generated_videos_account_id"), "generated_videos", ["account_id"])
    op.create_index(op.f("ix_generated_videos_task_id"), "generated_videos", ["task_id"])
    op.create_index(op.f("ix_generated_videos_created_at"), "generated_videos", ["created_at"])


def downgrade() -> None:
    """Drop all PixelReel tables."""
    op.drop_index(op.f("ix_generated_videos_created_at"), table_name="generated_videos")
    op.drop_index(op.f("ix_generated_videos_task_id"), table_name="generated_videos")
    op.drop_index(op.f("ix_generated_videos_account_id"), table_name="generated_videos")
    op.drop_table("generated_videos")

    op.drop_index(op.f("ix_generated_images_created_at"), table_name="generated_images")
    op.drop_index(op.f("ix_generated_images_account_id"), table_name="generated_images")
    op.drop_table("generated_images")

    op.drop_index(op.f("ix_usage_counters_account_id"), table_name="usage_counters")
    op.drop_table("usage_counters")

    op.drop_index(
        op.f("ix_subscriptions_external_subscription_ref"), table_name="subscriptions"
    )
    op.drop_index(op.f("ix_subscriptions_account_id"), table_name="subscriptions")
    op.drop_table("subscriptions")
