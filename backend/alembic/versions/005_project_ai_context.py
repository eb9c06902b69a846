"""Add ai_context to projects.

Revision ID: 005
Revises: 004
Create Date: 2025-03-10

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("projects", sa.Column("ai_context", sa.Text(), nullable=True))


def downgrade() -> None:
    op.drop_column("projects", "ai_context")
