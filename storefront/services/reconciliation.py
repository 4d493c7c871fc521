from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from storefront.app.db.models.models_v1 import Product, Purchase, PurchaseVoucher, utcnow
from storefront.services.quantity import PurchaseAmounts, Skip, derive_quantity

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


@dataclass
class ReconciliationSummary:
    total: int = 0
    updated: int = 0
    skipped: int = 0
    skipped_no_price: int = 0
    errors: int = 0
    stopped: bool = False
    # dernier id traité (curseur de reprise, ids décroissants)
    last_id: int | None = None

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "updated": self.updated,
            "skipped": self.skipped,
            "skipped_no_price": self.skipped_no_price,
            "errors": self.errors,
            "stopped": self.stopped,
            "last_id": self.last_id,
        }


def _fetch_batch(db: Session, *, before_id: int | None, limit: int):
    stmt = (
        select(
            Purchase.id,
            Purchase.product_id,
            Purchase.total_amount,
            Purchase.original_amount,
            Purchase.quantity,
            Product.price,
            PurchaseVoucher.discount_amount,
        )
        .outerjoin(Product, Product.id == Purchase.product_id)
        .outerjoin(PurchaseVoucher, PurchaseVoucher.purchase_id == Purchase.id)
        .where(Purchase.product_id.is_not(None))
        .order_by(Purchase.id.desc())
        .limit(limit)
    )
    if before_id is not None:
        stmt = stmt.where(Purchase.id < before_id)
    return db.execute(stmt).all()


def apply_quantity(db: Session, purchase_id: int, quantity: int) -> None:
    db.execute(
        update(Purchase)
        .where(Purchase.id == purchase_id)
        .values(quantity=quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.commit()


def reconcile_purchase_quantities(
    session_factory: sessionmaker,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    start_after_id: int | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> ReconciliationSummary:
    """
    Recalcule purchases.quantity pour toutes les commandes liées à un produit.

    Règle métier : voir services.quantity.derive_quantity.

    Propriétés :
    - idempotent : une ligne déjà correcte n'est jamais réécrite
      (pas de churn sur updated_at), un 2e passage donne updated == 0
    - isolation par ligne : un échec d'écriture est compté en erreur,
      le batch continue
    - parcours par curseur (ids décroissants, lots de `batch_size`)
    - arrêt propre entre deux lignes via `should_stop`, reprise avec
      `start_after_id=summary.last_id`
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be > 0")

    summary = ReconciliationSummary()
    cursor = start_after_id

    with session_factory() as db:
        while True:
            rows = _fetch_batch(db, before_id=cursor, limit=batch_size)
            # libère le snapshot de lecture avant les écritures
            db.rollback()
            if not rows:
                break

            for row in rows:
                if should_stop is not None and should_stop():
                    summary.stopped = True
                    logger.warning("Reconciliation stopped before purchase #%s", row.id)
                    return summary

                summary.total += 1
                _reconcile_row(db, row, summary)
                summary.last_id = row.id

            cursor = rows[-1].id
            if len(rows) < batch_size:
                break

    return summary


def _reconcile_row(db: Session, row, summary: ReconciliationSummary) -> None:
    result = derive_quantity(
        PurchaseAmounts(
            total_amount=row.total_amount,
            original_amount=row.original_amount,
            discount_amount=row.discount_amount,
        ),
        row.price,
    )

    if isinstance(result, Skip):
        logger.warning("Purchase #%s: skipped, product price not found (product_id=%s)", row.id, row.product_id)
        summary.skipped += 1
        summary.skipped_no_price += 1
        return

    if row.quantity == result.quantity:
        logger.debug("Purchase #%s: already correct (qty=%s)", row.id, result.quantity)
        summary.skipped += 1
        return

    try:
        apply_quantity(db, row.id, result.quantity)
    except Exception:
        db.rollback()
        logger.exception("Purchase #%s: quantity update failed", row.id)
        summary.errors += 1
        return

    logger.info(
        "Purchase #%s: quantity %s -> %s (source=%s, price=%s, total=%s, discount=%s)",
        row.id,
        row.quantity if row.quantity is not None else "NULL",
        result.quantity,
        result.source.value,
        row.price,
        row.total_amount,
        row.discount_amount or 0,
    )
    summary.updated += 1
