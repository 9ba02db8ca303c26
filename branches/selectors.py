"""Selectors for branches."""

from django.db.models import Prefetch, QuerySet

from .models import Branch


def list_branches() -> QuerySet[Branch]:
    """Return branches ordered by name with their users prefetched."""

    from django.contrib.auth import get_user_model

    User = get_user_model()
    return Branch.objects.prefetch_related(
        Prefetch("users", queryset=User.objects.order_by("name"))
    ).order_by("name")


def get_branch(branch_id) -> Branch | None:
    try:
        return Branch.objects.get(id=branch_id)
    except (Branch.DoesNotExist, ValueError, TypeError):
        return None
