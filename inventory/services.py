"""Inventory services: the transactional stock-mutation workflow.

Every stock change goes through ``apply_locked_movement``: ensure the stock row
exists, lock it, compute the new value, refuse negatives, then write the value
and append exactly one movement. Manual adjustments (``apply_movement``) and
sale placement (``sales.services.place_sale``) both call it inside their own
``transaction.atomic()`` block, so a failure anywhere rolls back every write.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from catalog.models import Product, ProductVariant
from common.choices import MovementType
from common.exceptions import InsufficientStock, NotFound, ValidationError
from django.db import transaction

from .ledger import append_movement, ensure_stock_item, lock_stock_item, set_stock_value
from .models import StockItem, StockMovement

logger = logging.getLogger("pos.inventory")

REASON_MAX_LENGTH = StockMovement._meta.get_field("reason").max_length


@dataclass(frozen=True)
class MovementResult:
    stock_item: StockItem
    movement: StockMovement

    @property
    def stock(self) -> int:
        return self.stock_item.stock


def compute_new_stock(current: int, movement_type: str, quantity: int) -> int:
    """Apply one movement to a stock value; the result may be negative."""

    if movement_type == MovementType.IN:
        return current + quantity
    if movement_type == MovementType.OUT:
        return current - quantity
    if movement_type == MovementType.SET:
        return quantity
    raise ValidationError(f"Unknown movement type: {movement_type!r}.")


def validate_quantity(movement_type: str, quantity) -> int:
    if movement_type not in MovementType.values:
        raise ValidationError(f"Unknown movement type: {movement_type!r}.")
    # bool is an int subclass
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("Quantity must be an integer.")
    if movement_type == MovementType.SET:
        if quantity < 0:
            raise ValidationError("Stock cannot be set to a negative value.")
    elif quantity <= 0:
        raise ValidationError("Quantity must be positive.")
    return quantity


def validate_reason(reason) -> str:
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A reason is required.")
    if len(reason) > REASON_MAX_LENGTH:
        raise ValidationError(f"The reason must be at most {REASON_MAX_LENGTH} characters.")
    return reason


def resolve_subject(product_id, variant_id=None) -> tuple[Product, Optional[ProductVariant]]:
    """Load the product and, when given, a variant that must belong to it."""

    try:
        product = Product.objects.get(id=product_id)
    except (Product.DoesNotExist, ValueError, TypeError):
        raise NotFound("Product not found.")
    if variant_id in (None, ""):
        return product, None
    try:
        variant = ProductVariant.objects.get(id=variant_id)
    except (ProductVariant.DoesNotExist, ValueError, TypeError):
        raise NotFound("Variant not found.")
    if variant.product_id != product.id:
        raise ValidationError("The variant does not belong to the product.")
    return product, variant


def apply_locked_movement(
    *,
    user_id: int,
    branch_id: int,
    product: Product,
    variant: Optional[ProductVariant],
    movement_type: str,
    quantity: int,
    reason: str,
) -> MovementResult:
    """Mutate one stock row and record its movement. Caller holds the transaction."""

    variant_id = variant.id if variant is not None else None
    item = ensure_stock_item(product_id=product.id, variant_id=variant_id, branch_id=branch_id)
    item = lock_stock_item(item.id)

    before = int(item.stock)
    new_stock = compute_new_stock(before, movement_type, quantity)
    if new_stock < 0:
        subject = f"{product.name} ({variant.label})" if variant is not None else product.name
        raise InsufficientStock(f"Insufficient stock for {subject}: {before} available, {quantity} requested.")

    set_stock_value(item, new_stock)
    movement = append_movement(
        product_id=product.id,
        variant_id=variant_id,
        branch_id=branch_id,
        user_id=user_id,
        movement_type=movement_type,
        quantity=quantity,
        reason=reason,
        stock_before=before,
        stock_after=new_stock,
    )
    return MovementResult(stock_item=item, movement=movement)


def apply_movement(
    *,
    actor,
    product_id: int,
    variant_id: Optional[int] = None,
    movement_type: str,
    quantity: int,
    reason: str,
    branch_id: Optional[int] = None,
) -> MovementResult:
    """Apply a manual in/out/set movement at the actor's branch.

    Raises ``ValidationError``, ``NotFound``, ``NoBranchAssigned``,
    ``Unauthorized`` or ``InsufficientStock``; on any of them nothing is written.
    """

    quantity = validate_quantity(movement_type, quantity)
    reason = validate_reason(reason)
    target_branch = actor.resolve_branch(branch_id)

    try:
        with transaction.atomic():
            product, variant = resolve_subject(product_id, variant_id)
            result = apply_locked_movement(
                user_id=actor.user_id,
                branch_id=target_branch,
                product=product,
                variant=variant,
                movement_type=movement_type,
                quantity=quantity,
                reason=reason,
            )
    except InsufficientStock:
        logger.info(
            "stock.movement_rejected",
            extra={
                "event": "stock.movement_rejected",
                "product_id": product_id,
                "variant_id": variant_id,
                "branch_id": target_branch,
                "user_id": actor.user_id,
                "movement_type": movement_type,
                "quantity": quantity,
            },
        )
        raise

    logger.info(
        "stock.movement_applied",
        extra={
            "event": "stock.movement_applied",
            "movement_id": result.movement.id,
            "product_id": product.id,
            "variant_id": result.movement.variant_id,
            "branch_id": target_branch,
            "user_id": actor.user_id,
            "movement_type": movement_type,
            "quantity": quantity,
            "stock_before": result.movement.stock_before,
            "stock_after": result.movement.stock_after,
        },
    )
    return result


# EOF
