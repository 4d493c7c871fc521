from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.app.api.deps import get_db
from storefront.app.db.models.models_v1 import Purchase
from storefront.app.schemas.purchase import PurchaseCreate, PurchaseRead
from storefront.services.purchases import (
    InsufficientStockError,
    ProductNotFoundError,
    ShippingInfo,
    create_purchase,
)

router = APIRouter(prefix="/purchases")


@router.get("", response_model=list[PurchaseRead])
def list_purchases(db: Session = Depends(get_db)):
    return db.execute(select(Purchase).order_by(Purchase.id.desc())).scalars().all()


@router.get("/{purchase_id}", response_model=PurchaseRead)
def get_purchase(purchase_id: int, db: Session = Depends(get_db)):
    purchase = db.get(Purchase, purchase_id)
    if not purchase:
        raise HTTPException(status_code=404, detail="Purchase not found")
    return purchase


@router.post("", response_model=PurchaseRead, status_code=201)
def checkout(payload: PurchaseCreate, db: Session = Depends(get_db)):
    try:
        return create_purchase(
            db,
            product_id=payload.product_id,
            quantity=payload.quantity,
            shipping=ShippingInfo(
                recipient_name=payload.shipping.recipient_name,
                address=payload.shipping.address,
                phone=payload.shipping.phone,
            ),
            voucher_code=payload.voucher_code,
            discount_amount=payload.discount_amount,
        )
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except InsufficientStockError:
        raise HTTPException(status_code=409, detail="Insufficient stock")
