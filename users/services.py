"""User management services for administrators.

Passwords are hashed with ``set_password``; email uniqueness is enforced by the
database and surfaced as ``ConflictError``.
"""

import logging

from branches.models import Branch
from common.choices import UserRole
from common.exceptions import ConflictError, NotFound, ValidationError
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError

from .models import User

logger = logging.getLogger("pos.users")

MIN_PASSWORD_LENGTH = 6


def _resolve_branch(branch_id):
    if branch_id in (None, ""):
        return None
    try:
        return Branch.objects.get(id=branch_id)
    except (Branch.DoesNotExist, ValueError, TypeError):
        raise NotFound("Branch not found.")


def _validate(*, name: str, email: str, role: str, password: str | None, password_required: bool):
    if not (name or "").strip():
        raise ValidationError("Name is required.")
    if not (email or "").strip() or "@" not in email:
        raise ValidationError("A valid email is required.")
    if role not in UserRole.values:
        raise ValidationError("Unknown role.")
    if password_required and not password:
        raise ValidationError("Password is required.")
    if password and len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")


@transaction.atomic
def create_user(*, actor, name: str, email: str, password: str, role: str, branch_id=None) -> User:
    actor.require_admin()
    _validate(name=name, email=email, role=role, password=password, password_required=True)
    email = email.strip().lower()
    if User.objects.filter(email=email).exists():
        raise ConflictError("A user with that email already exists.")

    user = User(name=name.strip(), email=email, username=email, role=role, branch=_resolve_branch(branch_id))
    user.set_password(password)
    try:
        with transaction.atomic():
            user.save()
    except IntegrityError:
        raise ConflictError("A user with that email already exists.")
    logger.info("user.created", extra={"event": "user.created", "user_id": user.id, "role": role})
    return user


@transaction.atomic
def update_user(
    *, actor, user_id: int, name: str, email: str, role: str, branch_id=None, password: str | None = None
) -> User:
    """Update profile fields; the password changes only when a new one is given."""

    actor.require_admin()
    _validate(name=name, email=email, role=role, password=password, password_required=False)
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound("User not found.")

    email = email.strip().lower()
    if User.objects.filter(email=email).exclude(id=user.id).exists():
        raise ConflictError("Another user already uses that email.")

    user.name = name.strip()
    user.email = email
    user.username = email
    user.role = role
    user.branch = _resolve_branch(branch_id)
    if password:
        user.set_password(password)
    try:
        with transaction.atomic():
            user.save()
    except IntegrityError:
        raise ConflictError("Another user already uses that email.")
    logger.info("user.updated", extra={"event": "user.updated", "user_id": user.id})
    return user


@transaction.atomic
def delete_user(*, actor, user_id: int) -> None:
    actor.require_admin()
    if str(user_id) == str(actor.user_id):
        raise ValidationError("You cannot delete your own account.")
    try:
        user = User.objects.get(id=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound("User not found.")
    try:
        with transaction.atomic():
            user.delete()
    except ProtectedError:
        raise ConflictError("The user has recorded sales or movements and cannot be deleted.")
    logger.info("user.deleted", extra={"event": "user.deleted", "user_id": user_id})


# EOF
