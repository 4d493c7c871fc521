import enum

class PurchaseStatus(str, enum.Enum):
    pending = "PENDING"
    paid = "PAID"
    shipped = "SHIPPED"
    completed = "COMPLETED"
    cancelled = "CANCELLED"

class QuantitySource(str, enum.Enum):
    """Champ financier ayant servi à reconstruire purchases.quantity."""
    original_amount = "original_amount"
    total_plus_discount = "total_plus_discount"
    total_amount = "total_amount"
