"""Selectors for the catalog domain.

Read-only query helpers that keep views thin. The POS listing annotates each
product and variant with the stock of one branch; a missing stock row reads as 0.
"""

from typing import Optional

from django.db.models import IntegerField, Prefetch, Q, QuerySet
from django.db.models.expressions import OuterRef, Subquery
from django.db.models.functions import Coalesce
from inventory.models import StockItem

from .models import Category, Product, ProductVariant


def list_categories() -> QuerySet[Category]:
    return Category.objects.order_by("name")


def list_products(*, include_inactive: bool = True) -> QuerySet[Product]:
    """Products with category and variants for admin screens."""

    qs = Product.objects.select_related("category").prefetch_related("variants")
    if not include_inactive:
        qs = qs.filter(active=True)
    return qs.order_by("name", "id")


def get_product(product_id) -> Optional[Product]:
    try:
        return list_products().get(id=product_id)
    except (Product.DoesNotExist, ValueError, TypeError):
        return None


def _branch_stock(branch_id: int, **subject) -> Coalesce:
    sub = Subquery(
        StockItem.objects.filter(branch_id=branch_id, **subject).values("stock")[:1],
        output_field=IntegerField(),
    )
    return Coalesce(sub, 0)


def list_pos_products(
    *, branch_id: int, search: Optional[str] = None, category_id: Optional[int] = None
) -> QuerySet[Product]:
    """Active products for the POS with ``branch_stock`` on products and variants."""

    variants = ProductVariant.objects.annotate(
        branch_stock=_branch_stock(branch_id, variant_id=OuterRef("pk"))
    ).order_by("id")
    qs = (
        Product.objects.filter(active=True)
        .select_related("category")
        .prefetch_related(Prefetch("variants", queryset=variants))
        .annotate(branch_stock=_branch_stock(branch_id, product_id=OuterRef("pk"), variant__isnull=True))
    )
    if category_id:
        qs = qs.filter(category_id=category_id)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(barcode=search))
    return qs.order_by("name", "id")
