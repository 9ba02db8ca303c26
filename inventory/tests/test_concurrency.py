"""Concurrent stock mutations. Needs a database with row locks (PostgreSQL)."""

import threading

import pytest
from catalog.tests.factories import ProductFactory
from common.exceptions import InsufficientStock
from django.db import connection, connections
from inventory import ledger
from inventory.models import StockItem, StockMovement
from inventory.services import apply_movement
from users.tests.factories import UserFactory, actor_for

pytestmark = pytest.mark.skipif(
    connection.vendor == "sqlite", reason="SQLite has no row-level locking"
)


def _run_in_threads(count, target):
    barrier = threading.Barrier(count)
    errors = []

    def worker():
        try:
            barrier.wait()
            target()
        except Exception as exc:  # collected and asserted by the caller
            errors.append(exc)
        finally:
            connections.close_all()

    threads = [threading.Thread(target=worker) for _ in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return errors


@pytest.mark.django_db(transaction=True)
def test_concurrent_outs_never_oversell():
    seller = UserFactory()
    product = ProductFactory()
    StockItem.objects.create(product=product, branch=seller.branch, stock=5)
    actor = actor_for(seller)

    errors = _run_in_threads(
        8,
        lambda: apply_movement(actor=actor, product_id=product.id, movement_type="out", quantity=1, reason="race"),
    )

    assert all(isinstance(e, InsufficientStock) for e in errors)
    assert len(errors) == 3
    assert StockItem.objects.get(product=product).stock == 0
    assert StockMovement.objects.filter(product=product).count() == 5


@pytest.mark.django_db(transaction=True)
def test_concurrent_ensure_creates_one_row():
    seller = UserFactory()
    product = ProductFactory()

    errors = _run_in_threads(
        4,
        lambda: ledger.ensure_stock_item(product_id=product.id, variant_id=None, branch_id=seller.branch_id),
    )

    assert errors == []
    rows = StockItem.objects.filter(product=product, branch=seller.branch)
    assert rows.count() == 1
    assert rows.get().stock == 0
