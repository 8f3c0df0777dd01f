"""create video tasks table

Revision ID: 8b2e4d6f1a3c
Revises: 3f1c9a7d2b10
Create Date: 2026-10-19 16:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel.sql.sqltypes
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8b2e4d6f1a3c"
down_revision: Union[str, Sequence[str], None] = "3f1c9a7d2b10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Track which account submitted each video generation task."""
    op.create_table(
        "video_tasks",
        sa.Column("task_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("account_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("task_id"),
    )
    op.create_index(op.f("ix_video_tasks_account_id"), "video_tasks", ["account_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_video_tasks_account_id"), table_name="video_tasks")
    op.drop_table("video_tasks")
