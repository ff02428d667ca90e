"""create girls and girls_status tables

Revision ID: 8a4e6d1f0c25
Revises:
Create Date: 2026-10-12 14:02:51.774019
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers
revision: str = "8a4e6d1f0c25"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "girls",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("girl_number", sa.Integer(), nullable=False, unique=True),
        sa.Column("city_id", sa.String(length=36), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("avatar_url", sa.String(length=1024), nullable=True),
        sa.Column(
            "is_blocked", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "is_verified", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )

    # Partner listing filters on these three columns together
    op.create_index(
        "idx_girls_public_listing",
        "girls",
        ["is_blocked", "is_verified", "sort_order"],
    )

    op.create_table(
        "girls_status",
        sa.Column("girl_id", sa.String(length=36), primary_key=True),
        sa.Column(
            "status",
            sa.String(length=32),
            nullable=False,
            server_default="offline",
        ),
        sa.Column("current_lat", sa.Float(), nullable=True),
        sa.Column("current_lng", sa.Float(), nullable=True),
        sa.Column("next_available_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(
            ["girl_id"],
            ["girls.id"],
            ondelete="CASCADE",
        ),
    )


def downgrade() -> None:
    op.drop_table("girls_status")
    op.drop_index("idx_girls_public_listing", table_name="girls")
    op.drop_table("girls")
