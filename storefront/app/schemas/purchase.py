from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from storefront.app.db.models.core_types import PurchaseStatus


class ShippingAddress(BaseModel):
    recipient_name: str = Field(min_length=1, max_length=200)
    phone: str | None = Field(default=None, max_length=32)
    address: str = Field(min_length=1)


class PurchaseCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    shipping: ShippingAddress
    voucher_code: str | None = Field(default=None, max_length=64)
    discount_amount: Decimal | None = Field(default=None, ge=0)


class PurchaseRead(BaseModel):
    id: int
    product_id: int | None
    total_amount: Decimal
    original_amount: Decimal | None
    quantity: int | None
    status: PurchaseStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
