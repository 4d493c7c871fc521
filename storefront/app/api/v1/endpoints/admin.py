from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import sessionmaker

from storefront.app.api.deps import get_session_factory
from storefront.jobs.sync_purchase_quantity import run_sync

router = APIRouter(prefix="/admin")


@router.post("/purchase-quantity/sync")
def sync_purchase_quantity(
    batch_size: int | None = None,
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Réconciliation purchases.quantity + miroir order_addresses (opération admin, rare).
    """
    report = run_sync(session_factory=session_factory, batch_size=batch_size)
    return {
        "purchases": report.purchases.as_dict(),
        "order_addresses_updated": report.order_addresses_updated,
        "order_addresses_error": report.order_addresses_error,
    }
