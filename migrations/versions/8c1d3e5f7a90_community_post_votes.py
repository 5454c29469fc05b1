"""community post votes

Revision ID: 8c1d3e5f7a90
Revises: 5b2f0c9e1a47
Create Date: 2026-10-19 14:02:17.540912

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "8c1d3e5f7a90"
down_revision: Union[str, Sequence[str], None] = "5b2f0c9e1a47"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add the ledger counter to community posts."""
    with op.batch_alter_table("community_post") as batch_op:
        batch_op.add_column(
            sa.Column("vote_count", sa.Integer(), nullable=False, server_default="0")
        )


def downgrade() -> None:
    with op.batch_alter_table("community_post") as batch_op:
        batch_op.drop_column("vote_count")
