from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.app.api.deps import get_db
from storefront.app.db.models.models_v1 import Product, utcnow
from storefront.app.schemas.product import ProductCreate, ProductRead

router = APIRouter(prefix="/products")


def _get_active_product(db: Session, product_id: int) -> Product:
    p = db.execute(
        select(Product).where(Product.id == product_id).where(Product.deleted_at.is_(None))
    ).scalar_one_or_none()
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return p


@router.get("", response_model=list[ProductRead])
def list_products(db: Session = Depends(get_db)):
    return (
        db.execute(
            select(Product)
            .where(Product.deleted_at.is_(None))
            .order_by(Product.created_at.desc(), Product.id.desc())
        )
        .scalars()
        .all()
    )


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _get_active_product(db, product_id)


@router.post("", response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    p = Product(
        name=payload.name,
        description=payload.description,
        price=payload.price,
        quantity=payload.quantity,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    # soft delete : les commandes existantes gardent leur produit
    p = _get_active_product(db, product_id)
    p.deleted_at = utcnow()
    p.updated_at = p.deleted_at
    db.commit()
