"""Create users, spirits, cocktails and comments tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Initial schema of the cocktail catalog.
How:   Portable types (sa.Uuid, sa.JSON, TIMESTAMP WITH TIME ZONE) so the same
       migration applies to PostgreSQL and SQLite.

Rollback: downgrade() drops all four tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("access_level", sa.Integer(), nullable=False, server_default=sa.text("1")),
        # Credential digest "salt$hash", never plaintext
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("avatar", sa.String(255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("new_user", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "spirits",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("spirit_name", sa.String(100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("spirit_name"),
    )

    op.create_table(
        "cocktails",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("cocktail_name", sa.String(200), nullable=False),
        sa.Column("spirit_name", sa.String(100), nullable=False),
        sa.Column("spirit_id", sa.Uuid(), nullable=False),
        sa.Column("preparation", sa.Text(), nullable=False),
        sa.Column("ingredients", sa.JSON(), nullable=False),
        sa.Column("story", sa.Text(), nullable=True),
        sa.Column("tips", sa.Text(), nullable=True),
        sa.Column("cocktail_image", sa.String(255), nullable=True),
        sa.Column("cocktail_header_image", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        # Closes the race between the name pre-check and the insert
        sa.UniqueConstraint("cocktail_name"),
        sa.ForeignKeyConstraint(["spirit_id"], ["spirits.id"], ondelete="RESTRICT"),
    )
    op.create_index("idx_cocktails_spirit_id", "cocktails", ["spirit_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column(
            "date_time",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("cocktail_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("user_name", sa.String(200), nullable=False),
        sa.Column("avatar", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["cocktail_id"], ["cocktails.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_comments_cocktail_id", "comments", ["cocktail_id"])


def downgrade() -> None:
    op.drop_index("idx_comments_cocktail_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("idx_cocktails_spirit_id", table_name="cocktails")
    op.drop_table("cocktails")
    op.drop_table("spirits")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
