"""Create marketplace categories and listings

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 10:12:31.402117

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3f1c9a7d2b10"
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = "marketplace"


def upgrade() -> None:
    """Upgrade schema."""
    op.execute(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}")

    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        schema=SCHEMA,
    )

    op.create_table(
        "listings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("condition", sa.String(length=20), nullable=False),
        sa.Column("brand", sa.String(length=100), nullable=True),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("is_available", sa.Boolean(), server_default=sa.text("TRUE"), nullable=False),
        sa.Column(
            "images",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column("views_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("seller_id", sa.Uuid(), nullable=True),
        sa.Column("category_id", sa.Uuid(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "condition IN ('new', 'like_new', 'good', 'fair', 'poor')",
            name="ck_listings_condition",
        ),
        sa.CheckConstraint("views_count >= 0", name="ck_listings_views_count"),
        sa.ForeignKeyConstraint(
            ["category_id"],
            [f"{SCHEMA}.categories.id"],
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id"),
        schema=SCHEMA,
    )

    op.create_index("ix_marketplace_listings_is_available", "listings", ["is_available"], schema=SCHEMA)
    op.create_index("ix_marketplace_listings_seller_id", "listings", ["seller_id"], schema=SCHEMA)
    op.create_index("ix_marketplace_listings_category_id", "listings", ["category_id"], schema=SCHEMA)
    op.create_index("ix_marketplace_listings_created_at", "listings", ["created_at"], schema=SCHEMA)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_marketplace_listings_created_at", table_name="listings", schema=SCHEMA)
    op.drop_index("ix_marketplace_listings_category_id", table_name="listings", schema=SCHEMA)
    op.drop_index("ix_marketplace_listings_seller_id", table_name="listings", schema=SCHEMA)
    op.drop_index("ix_marketplace_listings_is_available", table_name="listings", schema=SCHEMA)
    op.drop_table("listings", schema=SCHEMA)
    op.drop_table("categories", schema=SCHEMA)
