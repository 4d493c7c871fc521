"""
Job admin : resynchronise purchases.quantity puis order_addresses.quantity.

    python -m storefront.jobs.sync_purchase_quantity [--batch-size N] [--start-after ID]

Rejouable à volonté : un 2e passage ne modifie plus rien.
Ctrl+C / SIGTERM : arrêt propre entre deux commandes, reprise avec --start-after.
"""
from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from storefront.app.db.session import SessionLocal
from storefront.app.logging_setup import setup_logging
from storefront.services.order_addresses import sync_order_address_quantities
from storefront.services.reconciliation import (
    DEFAULT_BATCH_SIZE,
    ReconciliationSummary,
    reconcile_purchase_quantities,
)

logger = logging.getLogger("storefront.jobs.sync_purchase_quantity")

SYNC_BATCH_SIZE = int(os.getenv("SYNC_BATCH_SIZE", str(DEFAULT_BATCH_SIZE)))


@dataclass
class SyncReport:
    purchases: ReconciliationSummary
    order_addresses_updated: int | None = None
    order_addresses_error: str | None = None


def run_sync(
    *,
    session_factory: sessionmaker = SessionLocal,
    batch_size: int | None = None,
    start_after_id: int | None = None,
    stop_event: threading.Event | None = None,
) -> SyncReport:
    stop_event = stop_event or threading.Event()

    logger.info("Starting purchase quantity sync")
    summary = reconcile_purchase_quantities(
        session_factory,
        batch_size=batch_size or SYNC_BATCH_SIZE,
        start_after_id=start_after_id,
        should_stop=stop_event.is_set,
    )

    logger.info("=" * 50)
    logger.info("SYNC SUMMARY")
    logger.info("Total purchases:  %s", summary.total)
    logger.info("Updated:          %s", summary.updated)
    logger.info("Skipped:          %s (no price: %s)", summary.skipped, summary.skipped_no_price)
    logger.info("Errors:           %s", summary.errors)
    logger.info("=" * 50)

    report = SyncReport(purchases=summary)
    if summary.stopped:
        logger.warning("Stopped early, resume with --start-after %s", summary.last_id)
        return report

    # miroir : seulement après convergence des commandes
    with session_factory() as db:
        try:
            report.order_addresses_updated = sync_order_address_quantities(db)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            report.order_addresses_error = str(exc)
            logger.warning("order_addresses sync skipped: %s", exc)

    logger.info("Sync completed")
    return report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sync purchases.quantity and order_addresses.quantity")
    parser.add_argument("--batch-size", type=int, default=None)
    parser.add_argument("--start-after", type=int, default=None, help="resume below this purchase id")
    args = parser.parse_args(argv)

    setup_logging()

    stop_event = threading.Event()

    def _request_stop(signum, frame):
        logger.warning("Signal %s received, stopping after current purchase", signum)
        stop_event.set()

    previous = {sig: signal.signal(sig, _request_stop) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        run_sync(batch_size=args.batch_size, start_after_id=args.start_after, stop_event=stop_event)
    except SQLAlchemyError:
        logger.exception("Fatal error during purchase quantity sync")
        return 1
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    return 0


if __name__ == "__main__":
    sys.exit(main())
