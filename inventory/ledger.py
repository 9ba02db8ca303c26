"""Stock ledger: storage and point-in-time reads of stock rows and movements.

No business rules live here beyond persistence. Callers own the transaction;
``ensure_stock_item`` and ``lock_stock_item`` are meant to run inside
``transaction.atomic()``.
"""

from typing import Optional

from django.db import IntegrityError, transaction

from .models import StockItem, StockMovement


def _subject_filter(product_id: Optional[int], variant_id: Optional[int]) -> dict:
    # Variant rows are keyed by variant only; product rows by product with no variant
    if variant_id is not None:
        return {"variant_id": variant_id}
    return {"product_id": product_id, "variant__isnull": True}


def get_stock_item(*, product_id: Optional[int], variant_id: Optional[int], branch_id: int) -> Optional[StockItem]:
    return StockItem.objects.filter(branch_id=branch_id, **_subject_filter(product_id, variant_id)).first()


def ensure_stock_item(
    *, product_id: Optional[int], variant_id: Optional[int], branch_id: int, initial: int = 0
) -> StockItem:
    """Return the stock row for the subject at the branch, creating it if absent.

    The insert runs in a savepoint; when a concurrent caller wins the race the
    uniqueness constraint rejects ours and the winner's row is returned.
    """

    existing = get_stock_item(product_id=product_id, variant_id=variant_id, branch_id=branch_id)
    if existing is not None:
        return existing

    fields = {"variant_id": variant_id} if variant_id is not None else {"product_id": product_id}
    try:
        with transaction.atomic():
            return StockItem.objects.create(branch_id=branch_id, stock=initial, **fields)
    except IntegrityError:
        item = get_stock_item(product_id=product_id, variant_id=variant_id, branch_id=branch_id)
        if item is None:
            raise
        return item


def lock_stock_item(stock_item_id: int) -> StockItem:
    """Re-read a stock row holding a row lock until the transaction ends."""

    return StockItem.objects.select_for_update().get(id=stock_item_id)


def set_stock_value(stock_item: StockItem, new_stock: int) -> StockItem:
    stock_item.stock = int(new_stock)
    stock_item.save(update_fields=["stock", "updated_at"])
    return stock_item


def append_movement(
    *,
    product_id: int,
    variant_id: Optional[int],
    branch_id: int,
    user_id: int,
    movement_type: str,
    quantity: int,
    reason: str,
    stock_before: int,
    stock_after: int,
) -> StockMovement:
    return StockMovement.objects.create(
        product_id=product_id,
        variant_id=variant_id,
        branch_id=branch_id,
        user_id=user_id,
        movement_type=movement_type,
        quantity=quantity,
        reason=reason,
        stock_before=stock_before,
        stock_after=stock_after,
    )


# EOF
