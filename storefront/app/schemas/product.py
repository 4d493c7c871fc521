from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    quantity: int = Field(default=0, ge=0)


class ProductRead(BaseModel):
    id: int
    name: str
    description: str | None
    price: Decimal | None
    quantity: int  # stock courant, READ ONLY (écrit par reserve_stock)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
