from unittest import mock

import pytest
from catalog.tests.factories import ProductFactory, ProductVariantFactory
from common.exceptions import (
    InsufficientStock,
    NoBranchAssigned,
    NotFound,
    Unauthorized,
    ValidationError,
)
from inventory import ledger
from inventory.models import ImmutableRecordError, StockItem, StockMovement
from inventory.services import apply_movement, compute_new_stock
from inventory.tests.factories import ProductStockFactory
from users.tests.factories import AdminFactory, UserFactory, actor_for


@pytest.fixture
def seller():
    return UserFactory()


@pytest.mark.parametrize(
    "current,kind,qty,expected",
    [(10, "in", 5, 15), (10, "out", 4, 6), (10, "out", 11, -1), (10, "set", 0, 0), (3, "set", 8, 8)],
)
def test_compute_new_stock(current, kind, qty, expected):
    assert compute_new_stock(current, kind, qty) == expected


@pytest.mark.django_db
def test_out_then_overdraft_scenario(seller):
    item = ProductStockFactory(branch=seller.branch, stock=10)
    actor = actor_for(seller)

    result = apply_movement(
        actor=actor, product_id=item.product_id, movement_type="out", quantity=4, reason="test"
    )
    assert result.stock == 6
    assert result.movement.movement_type == StockMovement.TYPE_OUT
    assert result.movement.quantity == 4
    assert (result.movement.stock_before, result.movement.stock_after) == (10, 6)

    with pytest.raises(InsufficientStock):
        apply_movement(actor=actor, product_id=item.product_id, movement_type="out", quantity=10, reason="test")
    item.refresh_from_db()
    assert item.stock == 6
    assert StockMovement.objects.count() == 1


@pytest.mark.django_db
def test_every_movement_matches_counter_change(seller):
    item = ProductStockFactory(branch=seller.branch, stock=0)
    actor = actor_for(seller)
    steps = [("in", 7), ("out", 2), ("set", 20), ("out", 20), ("in", 1)]
    for kind, qty in steps:
        apply_movement(actor=actor, product_id=item.product_id, movement_type=kind, quantity=qty, reason="count")

    movements = list(StockMovement.objects.order_by("id"))
    assert len(movements) == len(steps)
    previous = 0
    for movement in movements:
        assert movement.stock_before == previous
        assert compute_new_stock(movement.stock_before, movement.movement_type, movement.quantity) == movement.stock_after
        previous = movement.stock_after
    item.refresh_from_db()
    assert item.stock == previous == 1


@pytest.mark.django_db
def test_rejected_movements_never_go_negative(seller):
    item = ProductStockFactory(branch=seller.branch, stock=3)
    actor = actor_for(seller)
    for qty in (2, 2, 1, 5):
        try:
            apply_movement(actor=actor, product_id=item.product_id, movement_type="out", quantity=qty, reason="x")
        except InsufficientStock:
            pass
        item.refresh_from_db()
        assert item.stock >= 0
    assert item.stock == 0
    assert StockMovement.objects.count() == 2


@pytest.mark.django_db
def test_missing_row_is_created_lazily(seller):
    product = ProductFactory()
    result = apply_movement(
        actor=actor_for(seller), product_id=product.id, movement_type="in", quantity=3, reason="delivery"
    )
    assert result.stock == 3
    assert result.movement.stock_before == 0
    assert StockItem.objects.filter(product=product, branch=seller.branch).count() == 1


@pytest.mark.django_db
def test_out_on_missing_row_fails_and_writes_nothing(seller):
    product = ProductFactory()
    with pytest.raises(InsufficientStock):
        apply_movement(actor=actor_for(seller), product_id=product.id, movement_type="out", quantity=1, reason="x")
    assert not StockMovement.objects.exists()
    # the lazily created row is rolled back with the rest of the transaction
    assert not StockItem.objects.filter(product=product).exists()


@pytest.mark.django_db
def test_variant_movement_targets_variant_row(seller):
    variant = ProductVariantFactory()
    ProductStockFactory(product=variant.product, branch=seller.branch, stock=50)
    result = apply_movement(
        actor=actor_for(seller),
        product_id=variant.product_id,
        variant_id=variant.id,
        movement_type="set",
        quantity=4,
        reason="count",
    )
    assert result.stock_item.variant_id == variant.id
    assert result.movement.product_id == variant.product_id
    assert StockItem.objects.get(product=variant.product, branch=seller.branch).stock == 50


@pytest.mark.django_db
@pytest.mark.parametrize(
    "kind,qty",
    [("in", 0), ("out", -1), ("set", -5), ("in", True), ("in", "3"), ("move", 1)],
)
def test_invalid_quantity_or_type(seller, kind, qty):
    product = ProductFactory()
    with pytest.raises(ValidationError):
        apply_movement(actor=actor_for(seller), product_id=product.id, movement_type=kind, quantity=qty, reason="x")


@pytest.mark.django_db
def test_blank_reason_rejected(seller):
    with pytest.raises(ValidationError):
        apply_movement(
            actor=actor_for(seller), product_id=ProductFactory().id, movement_type="in", quantity=1, reason="  "
        )


@pytest.mark.django_db
def test_overlong_reason_rejected_without_writes(seller):
    product = ProductFactory()
    with pytest.raises(ValidationError):
        apply_movement(actor=actor_for(seller), product_id=product.id, movement_type="in", quantity=1, reason="x" * 256)
    assert not StockItem.objects.filter(product=product).exists()
    assert not StockMovement.objects.exists()


@pytest.mark.django_db
def test_unknown_subject(seller):
    actor = actor_for(seller)
    with pytest.raises(NotFound):
        apply_movement(actor=actor, product_id=999999, movement_type="in", quantity=1, reason="x")
    product = ProductFactory()
    with pytest.raises(NotFound):
        apply_movement(actor=actor, product_id=product.id, variant_id=999999, movement_type="in", quantity=1, reason="x")


@pytest.mark.django_db
def test_variant_of_other_product_rejected(seller):
    variant = ProductVariantFactory()
    other = ProductFactory()
    with pytest.raises(ValidationError):
        apply_movement(
            actor=actor_for(seller), product_id=other.id, variant_id=variant.id, movement_type="in", quantity=1, reason="x"
        )


@pytest.mark.django_db
def test_branch_resolution_rules(seller):
    product = ProductFactory()
    other_branch = ProductStockFactory(product=product).branch

    with pytest.raises(Unauthorized):
        apply_movement(
            actor=actor_for(seller), product_id=product.id, movement_type="in", quantity=1, reason="x",
            branch_id=other_branch.id,
        )

    unassigned = UserFactory(branch=None)
    with pytest.raises(NoBranchAssigned):
        apply_movement(actor=actor_for(unassigned), product_id=product.id, movement_type="in", quantity=1, reason="x")

    admin = AdminFactory()
    result = apply_movement(
        actor=actor_for(admin), product_id=product.id, movement_type="in", quantity=1, reason="x",
        branch_id=other_branch.id,
    )
    assert result.stock == 11
    with pytest.raises(NotFound):
        apply_movement(
            actor=actor_for(admin), product_id=product.id, movement_type="in", quantity=1, reason="x", branch_id=999999
        )


@pytest.mark.django_db
def test_ensure_stock_item_is_idempotent(seller):
    product = ProductFactory()
    first = ledger.ensure_stock_item(product_id=product.id, variant_id=None, branch_id=seller.branch_id)
    second = ledger.ensure_stock_item(product_id=product.id, variant_id=None, branch_id=seller.branch_id)
    assert first.id == second.id
    assert StockItem.objects.filter(product=product).count() == 1
    assert first.stock == 0


@pytest.mark.django_db
def test_ensure_stock_item_returns_winner_after_lost_race(seller):
    product = ProductFactory()
    winner = StockItem.objects.create(product=product, branch=seller.branch, stock=0)
    real_get = ledger.get_stock_item

    # First lookup misses as if the concurrent insert had not committed yet
    with mock.patch.object(ledger, "get_stock_item", side_effect=[None, real_get(
        product_id=product.id, variant_id=None, branch_id=seller.branch_id
    )]):
        item = ledger.ensure_stock_item(product_id=product.id, variant_id=None, branch_id=seller.branch_id)

    assert item.id == winner.id
    assert StockItem.objects.filter(product=product).count() == 1


@pytest.mark.django_db
def test_movements_are_append_only(seller):
    item = ProductStockFactory(branch=seller.branch)
    result = apply_movement(
        actor=actor_for(seller), product_id=item.product_id, movement_type="in", quantity=1, reason="x"
    )
    movement = result.movement
    movement.reason = "edited"
    with pytest.raises(ImmutableRecordError):
        movement.save()
    with pytest.raises(ImmutableRecordError):
        movement.delete()
