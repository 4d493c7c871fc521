from __future__ import annotations

import logging

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from storefront.app.db.models.models_v1 import OrderAddress, Purchase, utcnow

logger = logging.getLogger(__name__)


def sync_order_address_quantities(db: Session) -> int:
    """
    Recopie purchases.quantity dans order_addresses.quantity.

    Règle :
        order_addresses.quantity = purchases.quantity
        WHERE quantity IS NULL OR quantity != purchases.quantity

    Propriétés :
    - une seule instruction UPDATE (set-based, pas de boucle Python)
    - seules les lignes périmées sont touchées (updated_at inchangé sinon)
    - pas de commit ici : l'appelant contrôle la transaction

    A lancer après la réconciliation des commandes.
    """
    stale = (
        select(Purchase.id)
        .where(Purchase.id == OrderAddress.purchase_id)
        .where(Purchase.quantity.is_not(None))
        .where(
            or_(
                OrderAddress.quantity.is_(None),
                OrderAddress.quantity != Purchase.quantity,
            )
        )
        .correlate(OrderAddress)
        .exists()
    )
    purchase_qty = (
        select(Purchase.quantity)
        .where(Purchase.id == OrderAddress.purchase_id)
        .correlate(OrderAddress)
        .scalar_subquery()
    )

    result = db.execute(
        update(OrderAddress)
        .where(stale)
        .values(quantity=purchase_qty, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    affected = result.rowcount or 0
    logger.info("order_addresses quantity sync: %s row(s) updated", affected)
    return affected
