from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from storefront.app.db.models.models_v1 import Product, utcnow

logger = logging.getLogger(__name__)


def reserve_stock(db: Session, product_id: int, quantity: int) -> bool:
    """
    Décrémente le stock d'un produit de `quantity`, seulement s'il en reste assez.

    Règle métier :
        UPDATE products
        SET quantity = quantity - :q
        WHERE id = :id AND deleted_at IS NULL AND quantity >= :q

    Propriétés :
    - une seule instruction conditionnelle (check + écriture atomiques côté SGBD)
    - aucun verrou applicatif, aucun retry
    - s'exécute dans la transaction de l'appelant (pas de commit / rollback ici)
    - True ssi exactement une ligne a été modifiée

    False = stock insuffisant, produit absent ou supprimé : l'appelant doit
    annuler sa transaction. Les erreurs SGBD (connexion perdue, etc.) remontent
    telles quelles, elles ne sont JAMAIS converties en False.
    """
    # bool est un int en Python : refusé aussi
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValueError("quantity must be a positive integer")

    result = db.execute(
        update(Product)
        .where(Product.id == product_id)
        .where(Product.deleted_at.is_(None))
        .where(Product.quantity >= quantity)
        .values(quantity=Product.quantity - quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )

    reserved = result.rowcount == 1
    if not reserved:
        logger.info("Stock reservation refused: product_id=%s quantity=%s", product_id, quantity)
    return reserved

