"""create task statuses table"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0002_create_task_statuses"
down_revision = "0001_create_tenants"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "task_statuses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("rank", sa.Float(), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("tenant_id", "name", name="uq_task_statuses_tenant_name"),
        sa.UniqueConstraint("tenant_id", "rank", name="uq_task_statuses_tenant_rank"),
    )
    op.create_index("ix_task_statuses_tenant_id", "task_statuses", ["tenant_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_task_statuses_tenant_id", table_name="task_statuses")
    op.drop_table("task_statuses")
