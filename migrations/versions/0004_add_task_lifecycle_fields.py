"""add cancel and activation fields"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0004_add_task_lifecycle_fields"
down_revision = "0003_create_tasks"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "tasks",
        sa.Column("is_canceled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.add_column("tasks", sa.Column("canceled_at", sa.DateTime(), nullable=True))
    op.add_column("tasks", sa.Column("activated_at", sa.DateTime(), nullable=True))


def downgrade() -> None:
    op.drop_column("tasks", "activated_at")
    op.drop_column("tasks", "canceled_at")
    op.drop_column("tasks", "is_canceled")
