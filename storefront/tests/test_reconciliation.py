import pytest
from sqlalchemy import delete, select
from sqlalchemy.exc import OperationalError

from factories import add_product, add_purchase
from storefront.app.db.models.models_v1 import Product, Purchase
from storefront.services import reconciliation
from storefront.services.reconciliation import reconcile_purchase_quantities


def _quantities(session_factory) -> dict[int, int | None]:
    with session_factory() as db:
        return dict(db.execute(select(Purchase.id, Purchase.quantity)).all())


def _seed_mixed(session_factory):
    """
    - a : original_amount -> 3 (stocké NULL)
    - b : total + remise -> 2 (stocké 5)
    - c : total seul -> 1 (déjà correct)
    - d : produit sans prix -> skip
    """
    with session_factory() as db:
        p15 = add_product(db, price="15000")
        p20 = add_product(db, price="20000")
        legacy = add_product(db, price=None)
        a = add_purchase(db, product_id=p15.id, total_amount="40000", original_amount="45000")
        b = add_purchase(db, product_id=p20.id, total_amount="38000", quantity=5, discount="2000")
        c = add_purchase(db, product_id=p20.id, total_amount="19000", quantity=1)
        d = add_purchase(db, product_id=legacy.id, total_amount="10000", quantity=7)
        db.commit()
        return a.id, b.id, c.id, d.id


def test_reconcile_updates_only_mismatches(session_factory):
    a, b, c, d = _seed_mixed(session_factory)

    summary = reconcile_purchase_quantities(session_factory)

    assert summary.total == 4
    assert summary.updated == 2
    assert summary.skipped == 2
    assert summary.skipped_no_price == 1
    assert summary.errors == 0
    assert summary.stopped is False

    qty = _quantities(session_factory)
    assert qty[a] == 3
    assert qty[b] == 2
    assert qty[c] == 1
    # jamais de quantité inventée sans prix
    assert qty[d] == 7


def test_second_run_is_a_no_op(session_factory):
    _seed_mixed(session_factory)
    reconcile_purchase_quantities(session_factory)

    with session_factory() as db:
        stamps = dict(db.execute(select(Purchase.id, Purchase.updated_at)).all())

    summary = reconcile_purchase_quantities(session_factory)

    assert summary.updated == 0
    assert summary.errors == 0
    with session_factory() as db:
        assert dict(db.execute(select(Purchase.id, Purchase.updated_at)).all()) == stamps


def test_missing_product_is_skipped(engine, session_factory):
    if engine.dialect.name != "sqlite":
        pytest.skip("orphan purchases need FK enforcement off (SQLite default)")
    with session_factory() as db:
        p = add_product(db, price="15000")
        pu = add_purchase(db, product_id=p.id, total_amount="45000", quantity=9)
        db.commit()
        pid = pu.id
        # produit supprimé physiquement (lignes legacy orphelines)
        db.execute(delete(Product).where(Product.id == p.id))
        db.commit()

    summary = reconcile_purchase_quantities(session_factory)

    assert summary.skipped_no_price == 1
    assert summary.updated == 0
    assert _quantities(session_factory)[pid] == 9


def test_soft_deleted_product_is_still_reconciled(session_factory):
    with session_factory() as db:
        p = add_product(db, price="15000", deleted=True)
        pu = add_purchase(db, product_id=p.id, total_amount="45000")
        db.commit()
        pid = pu.id

    summary = reconcile_purchase_quantities(session_factory)

    assert summary.updated == 1
    assert _quantities(session_factory)[pid] == 3


def test_purchases_without_product_are_ignored(session_factory):
    with session_factory() as db:
        pu = add_purchase(db, product_id=None, total_amount="45000")
        db.commit()
        pid = pu.id

    summary = reconcile_purchase_quantities(session_factory)

    assert summary.total == 0
    assert _quantities(session_factory)[pid] is None


def test_write_failure_is_isolated(session_factory, monkeypatch):
    """
    GIVEN 3 commandes à corriger, l'écriture de celle du milieu échoue
    THEN errors == 1, les 2 autres sont corrigées, le batch va au bout
    """
    with session_factory() as db:
        p = add_product(db, price="10000")
        ids = [add_purchase(db, product_id=p.id, total_amount="30000").id for _ in range(3)]
        db.commit()
    failing = ids[1]

    real_apply = reconciliation.apply_quantity

    def flaky_apply(db, purchase_id, quantity):
        if purchase_id == failing:
            raise OperationalError("UPDATE purchases", {}, Exception("lost connection"))
        return real_apply(db, purchase_id, quantity)

    monkeypatch.setattr(reconciliation, "apply_quantity", flaky_apply)

    summary = reconcile_purchase_quantities(session_factory)

    assert summary.total == 3
    assert summary.updated == 2
    assert summary.errors == 1
    qty = _quantities(session_factory)
    assert qty[ids[0]] == 3
    assert qty[ids[1]] is None
    assert qty[ids[2]] == 3


def test_processes_most_recent_first_across_batches(session_factory, monkeypatch):
    with session_factory() as db:
        p = add_product(db, price="10000")
        ids = [add_purchase(db, product_id=p.id, total_amount="20000").id for _ in range(5)]
        db.commit()

    seen = []
    real_apply = reconciliation.apply_quantity

    def spy(db, purchase_id, quantity):
        seen.append(purchase_id)
        return real_apply(db, purchase_id, quantity)

    monkeypatch.setattr(reconciliation, "apply_quantity", spy)

    summary = reconcile_purchase_quantities(session_factory, batch_size=2)

    assert summary.updated == 5
    assert seen == sorted(ids, reverse=True)
    assert summary.last_id == min(ids)


def test_stop_and_resume(session_factory):
    with session_factory() as db:
        p = add_product(db, price="10000")
        ids = [add_purchase(db, product_id=p.id, total_amount="20000").id for _ in range(4)]
        db.commit()

    calls = {"n": 0}

    def stop_after_two():
        calls["n"] += 1
        return calls["n"] > 2

    first = reconcile_purchase_quantities(session_factory, batch_size=3, should_stop=stop_after_two)

    assert first.stopped is True
    assert first.updated == 2
    assert first.last_id == sorted(ids, reverse=True)[1]
    qty = _quantities(session_factory)
    assert sum(1 for i in ids if qty[i] == 2) == 2

    second = reconcile_purchase_quantities(session_factory, start_after_id=first.last_id)

    assert second.stopped is False
    assert second.total == 2
    assert second.updated == 2
    assert all(q == 2 for q in _quantities(session_factory).values())


def test_invalid_batch_size(session_factory):
    with pytest.raises(ValueError):
        reconcile_purchase_quantities(session_factory, batch_size=0)


def test_summary_as_dict(session_factory):
    _seed_mixed(session_factory)
    data = reconcile_purchase_quantities(session_factory).as_dict()
    assert data["updated"] == 2
    assert set(data) == {"total", "updated", "skipped", "skipped_no_price", "errors", "stopped", "last_id"}
