"""Branch services: create/update with name uniqueness and guarded deletion."""

import logging

from common.exceptions import ConflictError, NotFound, ValidationError
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from .models import Branch

logger = logging.getLogger("pos.branches")


def _clean_name(name) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Branch name is required.")
    return name


@transaction.atomic
def create_branch(*, actor, name: str, address: str | None = None) -> Branch:
    """Create a branch and hand it to the creating user when they have none yet."""

    actor.require_admin()
    name = _clean_name(name)
    if Branch.objects.filter(name=name).exists():
        raise ConflictError("A branch with that name already exists.")
    try:
        with transaction.atomic():
            branch = Branch.objects.create(name=name, address=(address or "").strip() or None)
    except IntegrityError:
        raise ConflictError("A branch with that name already exists.")

    User = get_user_model()
    assigned = User.objects.filter(id=actor.user_id, branch__isnull=True).update(branch=branch)
    logger.info(
        "branch.created",
        extra={"event": "branch.created", "branch_id": branch.id, "user_id": actor.user_id, "assigned": bool(assigned)},
    )
    return branch


@transaction.atomic
def update_branch(*, actor, branch_id: int, name: str, address: str | None = None) -> Branch:
    actor.require_admin()
    name = _clean_name(name)
    try:
        branch = Branch.objects.select_for_update().get(id=branch_id)
    except (Branch.DoesNotExist, ValueError, TypeError):
        raise NotFound("Branch not found.")
    if Branch.objects.filter(name=name).exclude(id=branch.id).exists():
        raise ConflictError("Another branch already uses that name.")

    branch.name = name
    branch.address = (address or "").strip() or None
    try:
        with transaction.atomic():
            branch.save(update_fields=["name", "address", "updated_at"])
    except IntegrityError:
        raise ConflictError("Another branch already uses that name.")
    logger.info("branch.updated", extra={"event": "branch.updated", "branch_id": branch.id})
    return branch


@transaction.atomic
def delete_branch(*, actor, branch_id: int) -> None:
    """Delete a branch unless users or sales still reference it.

    Stock rows of the branch go with it (cascade); movement history keeps its rows.
    """

    from sales.models import Sale

    actor.require_admin()
    try:
        branch = Branch.objects.select_for_update().get(id=branch_id)
    except (Branch.DoesNotExist, ValueError, TypeError):
        raise NotFound("Branch not found.")

    User = get_user_model()
    if User.objects.filter(branch=branch).exists() or Sale.objects.filter(branch=branch).exists():
        raise ConflictError("The branch cannot be deleted because it has users or sales.")
    branch.delete()
    logger.info("branch.deleted", extra={"event": "branch.deleted", "branch_id": branch_id})


# EOF
