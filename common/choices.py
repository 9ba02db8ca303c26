"""Shared enumerations and choices used across apps."""

from django.db import models


class UserRole(models.TextChoices):
    """Roles recognised by the POS; admins manage catalog, branches and users."""

    ADMIN = "admin", "Admin"
    SELLER = "seller", "Seller"


class MovementType(models.TextChoices):
    """Kinds of stock movement.

    ``in`` and ``out`` carry a positive delta; ``set`` carries the new absolute stock.
    """

    IN = "in", "In"
    OUT = "out", "Out"
    SET = "set", "Set"


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash"
    CARD = "card", "Card"
    TRANSFER = "transfer", "Transfer"
