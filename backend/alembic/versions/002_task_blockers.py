"""Task blockers: blocked-by edges between tasks.

Revision ID: 002
Revises: 001
Create Date: 2025-01-13

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "task_blockers",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("task_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("blocker_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["task_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["blocker_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("task_id", "blocker_id", name="uq_task_blocker"),
        sa.CheckConstraint("task_id != blocker_id", name="ck_task_blocker_not_self"),
    )
    op.create_index("ix_task_blockers_task_id", "task_blockers", ["task_id"])
    op.create_index("ix_task_blockers_blocker_id", "task_blockers", ["blocker_id"])


def downgrade() -> None:
    op.drop_index("ix_task_blockers_blocker_id", table_name="task_blockers")
    op.drop_index("ix_task_blockers_task_id", table_name="task_blockers")
    op.drop_table("task_blockers")
