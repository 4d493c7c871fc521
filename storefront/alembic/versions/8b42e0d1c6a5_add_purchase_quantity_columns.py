"""add purchases.quantity and order_addresses.quantity

Revision ID: 8b42e0d1c6a5
Revises: 3f1a9c2d7b10
Create Date: 2026-09-21
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8b42e0d1c6a5"
down_revision: Union[str, Sequence[str], None] = "3f1a9c2d7b10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Colonnes nullable : les lignes existantes restent à NULL,
    # remplies ensuite par `python -m storefront.jobs.sync_purchase_quantity`
    op.add_column("purchases", sa.Column("quantity", sa.Integer(), nullable=True))
    op.add_column("order_addresses", sa.Column("quantity", sa.Integer(), nullable=True))
    op.create_index(
        "ix_order_addresses_purchase_qty",
        "order_addresses",
        ["purchase_id", "quantity"],
    )


def downgrade() -> None:
    op.drop_index("ix_order_addresses_purchase_qty", table_name="order_addresses")
    op.drop_column("order_addresses", "quantity")
    op.drop_column("purchases", "quantity")
