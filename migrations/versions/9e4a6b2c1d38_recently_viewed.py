"""recently viewed history

Revision ID: 9e4a6b2c1d38
Revises: 8c1d3e5f7a90
Create Date: 2026-10-19 15:40:03.118264

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "9e4a6b2c1d38"
down_revision: Union[str, Sequence[str], None] = "8c1d3e5f7a90"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "recently_viewed",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "post_id"),
    )
    op.create_index(
        "ix_recently_viewed_user_viewed", "recently_viewed", ["user_id", "viewed_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_recently_viewed_user_viewed", table_name="recently_viewed")
    op.drop_table("recently_viewed")
