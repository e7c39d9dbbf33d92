"""create time_entries table"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0003_create_time_entries"
down_revision = "0002_create_tasks"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "time_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "task_id",
            sa.Integer(),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("duration_hours", sa.Float(), nullable=False),
        sa.Column("logged_at", sa.DateTime(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.UniqueConstraint("task_id", "entry_id", name="uq_time_entries_task_entry"),
    )
    op.create_index("ix_time_entries_task_id", "time_entries", ["task_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_time_entries_task_id", table_name="time_entries")
    op.drop_table("time_entries")
