"""create storefront tables

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-09-02
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1a9c2d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PURCHASE_STATUS = sa.Enum("PENDING", "PAID", "SHIPPED", "COMPLETED", "CANCELLED", name="purchase_status")


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("price", sa.Numeric(14, 2)),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "purchases",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("product_id", sa.BigInteger(), sa.ForeignKey("products.id")),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("original_amount", sa.Numeric(14, 2)),
        sa.Column("status", PURCHASE_STATUS, nullable=False, server_default="PENDING"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_purchases_product_id", "purchases", ["product_id"])
    op.create_table(
        "purchase_vouchers",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "purchase_id",
            sa.BigInteger(),
            sa.ForeignKey("purchases.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("voucher_code", sa.String(64), nullable=False),
        sa.Column("discount_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("discount_amount >= 0", name="ck_purchase_voucher_discount_nonneg"),
    )
    op.create_table(
        "order_addresses",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "purchase_id",
            sa.BigInteger(),
            sa.ForeignKey("purchases.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("recipient_name", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(32)),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_order_addresses_purchase_id", "order_addresses", ["purchase_id"])


def downgrade() -> None:
    op.drop_index("ix_order_addresses_purchase_id", table_name="order_addresses")
    op.drop_table("order_addresses")
    op.drop_table("purchase_vouchers")
    op.drop_index("ix_purchases_product_id", table_name="purchases")
    op.drop_table("purchases")
    op.drop_table("products")
    PURCHASE_STATUS.drop(op.get_bind(), checkfirst=True)
