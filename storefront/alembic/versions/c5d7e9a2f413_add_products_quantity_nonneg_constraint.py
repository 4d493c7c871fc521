"""add products quantity nonneg constraint

Revision ID: c5d7e9a2f413
Revises: 8b42e0d1c6a5
Create Date: 2026-10-05
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "c5d7e9a2f413"
down_revision: Union[str, Sequence[str], None] = "8b42e0d1c6a5"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE_NAME = "products"
CONSTRAINT_NAME = "ck_product_quantity_nonneg"


def upgrade() -> None:
    # Stock déjà négatif (anciens scripts ad hoc) : clamp à 0 sinon l'ALTER échoue
    op.execute(
        f"""
        UPDATE {TABLE_NAME}
        SET quantity = 0
        WHERE quantity < 0;
        """
    )

    # Idempotent Postgres
    op.execute(
        f"""
        DO $$
        BEGIN
            IF NOT EXISTS (
                SELECT 1
                FROM pg_constraint c
                JOIN pg_class t ON t.oid = c.conrelid
                WHERE t.relname = '{TABLE_NAME}'
                  AND c.conname = '{CONSTRAINT_NAME}'
            ) THEN
                ALTER TABLE {TABLE_NAME}
                ADD CONSTRAINT {CONSTRAINT_NAME}
                CHECK (quantity >= 0);
            END IF;
        END $$;
        """
    )


def downgrade() -> None:
    op.execute(f"ALTER TABLE {TABLE_NAME} DROP CONSTRAINT IF EXISTS {CONSTRAINT_NAME};")
