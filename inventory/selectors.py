"""Selectors for the inventory domain (per-branch stock and movement history)."""

from typing import Optional

from django.db.models import QuerySet

from .models import StockItem, StockMovement


def list_stock_items(*, branch_id: Optional[int] = None) -> QuerySet[StockItem]:
    qs = StockItem.objects.select_related("product", "variant", "variant__product", "branch")
    if branch_id is not None:
        qs = qs.filter(branch_id=branch_id)
    return qs.order_by("branch_id", "id")


def list_movements(*, branch_id: Optional[int] = None) -> QuerySet[StockMovement]:
    """Movements newest first, optionally restricted to one branch."""

    qs = StockMovement.objects.select_related("product", "variant", "branch", "user")
    if branch_id is not None:
        qs = qs.filter(branch_id=branch_id)
    return qs.order_by("-created_at", "-id")


# EOF
