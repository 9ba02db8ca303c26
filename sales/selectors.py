"""Read helpers for the sales history."""

from typing import Optional

from common.exceptions import NotFound
from django.conf import settings
from django.db.models import QuerySet

from .models import Sale


def sales_for_actor(actor) -> QuerySet[Sale]:
    """Admins see every branch; everyone else only their own branch."""

    qs = Sale.objects.select_related("user", "branch").prefetch_related("items")
    if not actor.is_admin:
        qs = qs.filter(branch_id=actor.require_branch())
    return qs.order_by("-created_at", "-id")


def list_recent_sales(actor, limit: Optional[int] = None) -> list[Sale]:
    limit = limit or settings.POS_SALE_HISTORY_LIMIT
    return list(sales_for_actor(actor)[:limit])


def get_sale(actor, sale_id) -> Sale:
    try:
        return sales_for_actor(actor).get(id=sale_id)
    except (Sale.DoesNotExist, ValueError, TypeError):
        raise NotFound("Sale not found.")
