"""Create products and movement ledger tables.

Revision ID: 5e1a9c3d7b20
Revises:
Create Date: 2025-06-05 14:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = "5e1a9c3d7b20"
down_revision = None
branch_labels = None
depends_on = None


def _table_exists(table_name: str) -> bool:
    bind = op.get_bind()
    insp = inspect(bind)
    return bool(insp.has_table(table_name))


def upgrade() -> None:
    if not _table_exists("products"):
        op.create_table(
            "products",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_products_id", "products", ["id"])
        op.create_index("ix_products_name", "products", ["name"], unique=True)

    if not _table_exists("movement_ledger"):
        op.create_table(
            "movement_ledger",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "direction",
                sa.Enum("INWARD", "OUTWARD", name="movement_direction_enum", native_enum=False),
                nullable=False,
            ),
            sa.Column("sequence_no", sa.Integer(), nullable=True),
            sa.Column("occurred_at", sa.String(length=64), nullable=True),
            sa.Column(
                "product_name",
                sa.String(length=255),
                sa.ForeignKey("products.name", ondelete="RESTRICT"),
                nullable=False,
            ),
            sa.Column("pouch_batch_date", sa.String(length=32), nullable=True),
            sa.Column("pouch_count", sa.Integer(), nullable=False),
            sa.Column("weight_grams", sa.Float(), nullable=False),
            sa.Column("remarks", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint("pouch_count >= 0", name="ck_movement_ledger_pouch_count"),
            sa.CheckConstraint("weight_grams >= 0", name="ck_movement_ledger_weight_grams"),
            sqlite_autoincrement=True,
        )
        op.create_index("ix_movement_ledger_id", "movement_ledger", ["id"])
        op.create_index("ix_movement_ledger_direction", "movement_ledger", ["direction"])
        op.create_index("ix_movement_ledger_direction_date", "movement_ledger", ["direction", "occurred_at"])
        op.create_index("ix_movement_ledger_product", "movement_ledger", ["product_name", "direction"])


def downgrade() -> None:
    # The ledger is append-only; dropping it is a deliberate, manual act.
    op.drop_index("ix_movement_ledger_product", table_name="movement_ledger")
    op.drop_index("ix_movement_ledger_direction_date", table_name="movement_ledger")
    op.drop_index("ix_movement_ledger_direction", table_name="movement_ledger")
    op.drop_index("ix_movement_ledger_id", table_name="movement_ledger")
    op.drop_table("movement_ledger")
    op.drop_index("ix_products_name", table_name="products")
    op.drop_index("ix_products_id", table_name="products")
    op.drop_table("products")
