"""Catalog services: product provisioning and category management.

Creating a product seeds a stock row at the requested initial stock for every
branch, for the product itself and for each of its variants. Updating a product
never overwrites existing product stock rows (missing ones are created) and
reconciles variants in one step: removed variants go away with their stock,
new ones are created, and every variant's stock rows are regenerated at the
requested stock.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from branches.models import Branch
from common.exceptions import ConflictError, NotFound, ValidationError
from django.db import transaction
from django.db.models import ProtectedError
from inventory.models import StockItem

from .models import Category, Product, ProductVariant

logger = logging.getLogger("pos.catalog")


def _decimal(value, field: str, *, positive: bool = False) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number.")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number.")
    if positive and amount <= 0:
        raise ValidationError(f"{field} must be positive.")
    return amount.quantize(Decimal("0.01"))


def _clean_variants(variants: Optional[Iterable[dict]]) -> list[tuple[str, str, Decimal]]:
    cleaned = []
    seen = set()
    for raw in variants or []:
        name = (raw.get("name") or "").strip()
        value = (raw.get("value") or "").strip()
        if not name or not value:
            raise ValidationError("Each variant needs a name and a value.")
        if (name, value) in seen:
            raise ValidationError(f"Duplicate variant {name}: {value}.")
        seen.add((name, value))
        cleaned.append((name, value, _decimal(raw.get("price_adjustment", 0), "price_adjustment")))
    return cleaned


def _clean_product_fields(*, name, price, cost, category_id, stock) -> dict:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Product name is required.")
    if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
        raise ValidationError("Initial stock must be a non-negative integer.")
    try:
        category = Category.objects.get(id=category_id)
    except (Category.DoesNotExist, ValueError, TypeError):
        raise NotFound("Category not found.")
    return {
        "name": name,
        "price": _decimal(price, "price", positive=True),
        "cost": _decimal(cost, "cost", positive=True),
        "category": category,
    }


def _seed_variant_stock(variants: list[ProductVariant], branch_ids: list[int], stock: int) -> int:
    rows = [StockItem(variant=v, branch_id=b, stock=stock) for v in variants for b in branch_ids]
    StockItem.objects.bulk_create(rows)
    return len(rows)


@transaction.atomic
def create_product(
    *,
    actor,
    name: str,
    price,
    cost,
    category_id: int,
    stock: int,
    color: str = "",
    barcode: Optional[str] = None,
    image: Optional[str] = None,
    variants: Optional[Iterable[dict]] = None,
) -> Product:
    """Create a product with its variants and seed stock at every branch."""

    actor.require_admin()
    fields = _clean_product_fields(name=name, price=price, cost=cost, category_id=category_id, stock=stock)
    variant_rows = _clean_variants(variants)

    product = Product.objects.create(
        **fields,
        color=(color or "").strip(),
        barcode=(barcode or "").strip() or None,
        image=(image or "").strip() or None,
        active=True,
    )
    created_variants = [
        ProductVariant.objects.create(product=product, name=n, value=v, price_adjustment=adj)
        for n, v, adj in variant_rows
    ]

    branch_ids = list(Branch.objects.order_by("id").values_list("id", flat=True))
    StockItem.objects.bulk_create([StockItem(product=product, branch_id=b, stock=stock) for b in branch_ids])
    seeded_variants = _seed_variant_stock(created_variants, branch_ids, stock)

    logger.info(
        "product.created",
        extra={
            "event": "product.created",
            "product_id": product.id,
            "user_id": actor.user_id,
            "branches": len(branch_ids),
            "variants": len(created_variants),
            "variant_stock_rows": seeded_variants,
            "initial_stock": stock,
        },
    )
    return product


def _reconcile_variants(
    product: Product, wanted: list[tuple[str, str, Decimal]], branch_ids: list[int], stock: int
) -> list[ProductVariant]:
    existing: dict[tuple[str, str], ProductVariant] = {}
    stale: list[int] = []
    for variant in product.variants.order_by("id"):
        key = (variant.name, variant.value)
        if key in existing:
            stale.append(variant.id)
        else:
            existing[key] = variant

    kept: list[ProductVariant] = []
    for name, value, adjustment in wanted:
        variant = existing.pop((name, value), None)
        if variant is None:
            variant = ProductVariant.objects.create(
                product=product, name=name, value=value, price_adjustment=adjustment
            )
        elif variant.price_adjustment != adjustment:
            variant.price_adjustment = adjustment
            variant.save(update_fields=["price_adjustment", "updated_at"])
        kept.append(variant)

    stale.extend(v.id for v in existing.values())
    if stale:
        ProductVariant.objects.filter(id__in=stale).delete()

    StockItem.objects.filter(variant__in=kept).delete()
    _seed_variant_stock(kept, branch_ids, stock)
    return kept


@transaction.atomic
def update_product(
    *,
    actor,
    product_id: int,
    name: str,
    price,
    cost,
    category_id: int,
    stock: int,
    color: str = "",
    barcode: Optional[str] = None,
    image: Optional[str] = None,
    variants: Optional[Iterable[dict]] = None,
) -> Product:
    """Update a product, fill missing product stock rows and regenerate variant stock."""

    actor.require_admin()
    try:
        product = Product.objects.select_for_update().get(id=product_id)
    except (Product.DoesNotExist, ValueError, TypeError):
        raise NotFound("Product not found.")
    fields = _clean_product_fields(name=name, price=price, cost=cost, category_id=category_id, stock=stock)
    variant_rows = _clean_variants(variants)

    for attr, value in fields.items():
        setattr(product, attr, value)
    product.color = (color or "").strip()
    product.barcode = (barcode or "").strip() or None
    product.image = (image or "").strip() or None
    product.save()

    branch_ids = list(Branch.objects.order_by("id").values_list("id", flat=True))
    covered = set(
        StockItem.objects.filter(product=product, variant__isnull=True).values_list("branch_id", flat=True)
    )
    missing = [b for b in branch_ids if b not in covered]
    StockItem.objects.bulk_create([StockItem(product=product, branch_id=b, stock=stock) for b in missing])

    kept = _reconcile_variants(product, variant_rows, branch_ids, stock)

    logger.info(
        "product.updated",
        extra={
            "event": "product.updated",
            "product_id": product.id,
            "user_id": actor.user_id,
            "product_stock_rows_created": len(missing),
            "variants": len(kept),
        },
    )
    return product


def _set_active(*, actor, product_id: int, active: bool) -> Product:
    actor.require_admin()
    try:
        product = Product.objects.get(id=product_id)
    except (Product.DoesNotExist, ValueError, TypeError):
        raise NotFound("Product not found.")
    if product.active != active:
        product.active = active
        product.save(update_fields=["active", "updated_at"])
    logger.info(
        "product.restored" if active else "product.deactivated",
        extra={"event": "product.restored" if active else "product.deactivated", "product_id": product.id},
    )
    return product


def deactivate_product(*, actor, product_id: int) -> Product:
    """Soft delete: hide the product from the POS, keep history and stock."""

    return _set_active(actor=actor, product_id=product_id, active=False)


def restore_product(*, actor, product_id: int) -> Product:
    return _set_active(actor=actor, product_id=product_id, active=True)


def create_category(*, actor, name: str, color: str = "") -> Category:
    actor.require_admin()
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required.")
    return Category.objects.create(name=name, color=(color or "").strip())


def update_category(*, actor, category_id: int, name: str, color: str = "") -> Category:
    actor.require_admin()
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required.")
    try:
        category = Category.objects.get(id=category_id)
    except (Category.DoesNotExist, ValueError, TypeError):
        raise NotFound("Category not found.")
    category.name = name
    category.color = (color or "").strip()
    category.save(update_fields=["name", "color", "updated_at"])
    return category


@transaction.atomic
def delete_category(*, actor, category_id: int) -> None:
    actor.require_admin()
    try:
        category = Category.objects.get(id=category_id)
    except (Category.DoesNotExist, ValueError, TypeError):
        raise NotFound("Category not found.")
    try:
        with transaction.atomic():
            category.delete()
    except ProtectedError:
        raise ConflictError("The category still has products.")


# EOF
