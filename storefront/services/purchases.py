"""
Purchase service.

Ce module orchestre le checkout (commande, voucher, adresse de livraison)
mais ne modifie JAMAIS le stock directement.

Toute écriture de stock passe par :
    storefront.services.inventory.reserve_stock
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.app.db.models.models_v1 import OrderAddress, Product, Purchase, PurchaseVoucher
from storefront.app.db.models.core_types import PurchaseStatus
from storefront.services.inventory import reserve_stock

logger = logging.getLogger(__name__)


class ProductNotFoundError(Exception):
    pass


class InsufficientStockError(Exception):
    def __init__(self, product_id: int, quantity: int):
        super().__init__(f"Insufficient stock for product {product_id} (requested={quantity})")
        self.product_id = product_id
        self.quantity = quantity


@dataclass(frozen=True)
class ShippingInfo:
    recipient_name: str
    address: str
    phone: str | None = None


def create_purchase(
    db: Session,
    *,
    product_id: int,
    quantity: int,
    shipping: ShippingInfo,
    voucher_code: str | None = None,
    discount_amount: Decimal | None = None,
) -> Purchase:
    """
    Crée une commande et réserve le stock dans UNE transaction.

    - original_amount = prix * quantité
    - total_amount = original_amount - remise (remise plafonnée)
    - reserve_stock() == False -> rollback + InsufficientStockError
    - toute autre erreur -> rollback + propagation
    """
    product = db.execute(
        select(Product).where(Product.id == product_id).where(Product.deleted_at.is_(None))
    ).scalar_one_or_none()
    if product is None or product.price is None or product.price <= 0:
        raise ProductNotFoundError(f"Product {product_id} not found")

    original_amount = Decimal(product.price) * quantity
    discount = Decimal(0)
    if voucher_code and discount_amount:
        discount = min(Decimal(discount_amount), original_amount)

    try:
        purchase = Purchase(
            product_id=product_id,
            total_amount=original_amount - discount,
            original_amount=original_amount,
            quantity=quantity,
            status=PurchaseStatus.pending,
        )
        db.add(purchase)
        db.flush()  # get purchase.id

        if discount > 0:
            db.add(
                PurchaseVoucher(
                    purchase_id=purchase.id,
                    voucher_code=voucher_code,
                    discount_amount=discount,
                )
            )

        db.add(
            OrderAddress(
                purchase_id=purchase.id,
                recipient_name=shipping.recipient_name,
                phone=shipping.phone,
                address=shipping.address,
                quantity=quantity,
            )
        )
        db.flush()

        if not reserve_stock(db, product_id, quantity):
            db.rollback()
            raise InsufficientStockError(product_id, quantity)

        db.commit()
    except InsufficientStockError:
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(purchase)
    logger.info("Purchase #%s created: product_id=%s quantity=%s", purchase.id, product_id, quantity)
    return purchase
