from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    BigInteger,
    DateTime,
    ForeignKey,
    Numeric,
    Text,
    Enum,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.app.db.base import Base
from storefront.app.db.models.core_types import PurchaseStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------- CATALOG ----------
class Product(Base):
    __tablename__ = "products"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    # NULL possible sur les lignes historiques ; l'API impose > 0
    price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    # stock : écrit UNIQUEMENT par services.inventory.reserve_stock (ou restock externe)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_product_quantity_nonneg"),)


# ---------- CHECKOUT ----------
class Purchase(Base):
    __tablename__ = "purchases"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    product_id: Mapped[int | None] = mapped_column(ForeignKey("products.id"), index=True)

    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    # montant avant remise voucher (absent sur les anciennes commandes)
    original_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    # NULL / faux sur les lignes legacy -> corrigé par services.reconciliation
    quantity: Mapped[int | None] = mapped_column(Integer)

    status: Mapped[PurchaseStatus] = mapped_column(
        Enum(PurchaseStatus, name="purchase_status", values_callable=lambda e: [m.value for m in e]),
        default=PurchaseStatus.pending,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    product: Mapped[Product | None] = relationship()
    voucher: Mapped["PurchaseVoucher | None"] = relationship(back_populates="purchase", uselist=False)
    addresses: Mapped[list["OrderAddress"]] = relationship(back_populates="purchase")


class PurchaseVoucher(Base):
    __tablename__ = "purchase_vouchers"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    purchase_id: Mapped[int] = mapped_column(
        ForeignKey("purchases.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    voucher_code: Mapped[str] = mapped_column(String(64), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    purchase: Mapped[Purchase] = relationship(back_populates="voucher")

    __table_args__ = (CheckConstraint("discount_amount >= 0", name="ck_purchase_voucher_discount_nonneg"),)


# ---------- FULFILLMENT ----------
class OrderAddress(Base):
    __tablename__ = "order_addresses"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    purchase_id: Mapped[int] = mapped_column(
        ForeignKey("purchases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    recipient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32))
    address: Mapped[str] = mapped_column(Text, nullable=False)
    # copie dénormalisée de purchases.quantity (évite la jointure côté expédition)
    quantity: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    purchase: Mapped[Purchase] = relationship(back_populates="addresses")

    __table_args__ = (Index("ix_order_addresses_purchase_qty", "purchase_id", "quantity"),)
