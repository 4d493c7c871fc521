"""
Reconstruction de la quantité achetée à partir des montants d'une commande.

Aucun accès DB ici : fonction pure, réutilisée par la réconciliation.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from storefront.app.db.models.core_types import QuantitySource

MIN_QUANTITY = 1
NO_PRICE = "no_price"


@dataclass(frozen=True)
class PurchaseAmounts:
    total_amount: Decimal | None
    original_amount: Decimal | None = None
    discount_amount: Decimal | None = None


@dataclass(frozen=True)
class DerivedQuantity:
    quantity: int
    source: QuantitySource


@dataclass(frozen=True)
class Skip:
    reason: str


def _dec(value) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    # str() évite les artefacts binaires des float
    return Decimal(str(value))


def _is_positive(value: Decimal | None) -> bool:
    return value is not None and value > 0


def _round_units(amount: Decimal, unit_price: Decimal) -> int:
    # arrondi à l'entier le plus proche, .5 -> loin de zéro
    return int((amount / unit_price).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def derive_quantity(purchase: PurchaseAmounts, unit_price) -> DerivedQuantity | Skip:
    """
    Quantité canonique d'une commande.

    Priorité (premier cas applicable) :
        1. original_amount > 0          -> original_amount / prix
        2. remise voucher > 0           -> (total_amount + remise) / prix
        3. sinon                        -> total_amount / prix

    Résultat arrondi (half away from zero) puis plancher à 1.
    Prix absent ou <= 0 -> Skip("no_price").
    """
    price = _dec(unit_price)
    if not _is_positive(price):
        return Skip(NO_PRICE)

    original = _dec(purchase.original_amount)
    discount = _dec(purchase.discount_amount)
    total = _dec(purchase.total_amount) or Decimal(0)

    if _is_positive(original):
        raw, source = _round_units(original, price), QuantitySource.original_amount
    elif _is_positive(discount):
        raw, source = _round_units(total + discount, price), QuantitySource.total_plus_discount
    else:
        raw, source = _round_units(total, price), QuantitySource.total_amount

    return DerivedQuantity(quantity=max(MIN_QUANTITY, raw), source=source)
