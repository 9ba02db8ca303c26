"""Inventory models: per-branch stock counters and the movement ledger.

A ``StockItem`` holds the current stock of one subject (a plain product or one
product variant) at one branch. Every change to it is recorded as exactly one
append-only ``StockMovement`` written in the same transaction.
"""

from common.choices import MovementType
from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class StockItem(TimeStampedModel):
    # Subject is a product XOR a variant
    product = models.ForeignKey(
        "catalog.Product", null=True, blank=True, related_name="stock_items", on_delete=models.CASCADE
    )
    variant = models.ForeignKey(
        "catalog.ProductVariant", null=True, blank=True, related_name="stock_items", on_delete=models.CASCADE
    )
    branch = models.ForeignKey("branches.Branch", related_name="stock_items", on_delete=models.CASCADE)
    stock = models.IntegerField(default=0)

    class Meta:
        ordering = ["branch_id", "id"]
        constraints = [
            models.CheckConstraint(name="stock_non_negative", condition=models.Q(stock__gte=0)),
            models.CheckConstraint(
                name="stockitem_xor_product_variant",
                condition=(
                    models.Q(product__isnull=False, variant__isnull=True)
                    | models.Q(product__isnull=True, variant__isnull=False)
                ),
            ),
            models.UniqueConstraint(
                fields=["product", "branch"],
                condition=models.Q(variant__isnull=True),
                name="unique_stockitem_per_product_branch",
            ),
            models.UniqueConstraint(fields=["variant", "branch"], name="unique_stockitem_per_variant_branch"),
        ]
        indexes = [
            models.Index(fields=["branch", "product"], name="stockitem_branch_product_idx"),
            models.Index(fields=["branch", "variant"], name="stockitem_branch_variant_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        target = f"variant={self.variant_id}" if self.variant_id else f"product={self.product_id}"
        return f"StockItem<{target} branch={self.branch_id}> stock={self.stock}"


class ImmutableRecordError(Exception):
    """Raised when code tries to rewrite or delete a ledger entry."""


class StockMovement(models.Model):
    """Append-only audit record of one stock change.

    ``quantity`` is stored as entered: a positive delta for in/out, the new
    absolute stock for set. ``stock_before``/``stock_after`` capture the counter
    around the change.
    """

    TYPE_IN = MovementType.IN
    TYPE_OUT = MovementType.OUT
    TYPE_SET = MovementType.SET
    TYPE_CHOICES = MovementType.choices

    product = models.ForeignKey("catalog.Product", related_name="movements", on_delete=models.CASCADE)
    variant = models.ForeignKey(
        "catalog.ProductVariant", null=True, blank=True, related_name="movements", on_delete=models.SET_NULL
    )
    branch = models.ForeignKey(
        "branches.Branch", null=True, blank=True, related_name="movements", on_delete=models.SET_NULL
    )
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="movements", on_delete=models.PROTECT)
    movement_type = models.CharField(max_length=8, choices=TYPE_CHOICES, db_index=True)
    quantity = models.IntegerField()
    reason = models.CharField(max_length=255)
    stock_before = models.IntegerField()
    stock_after = models.IntegerField()
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(name="movement_quantity_non_negative", condition=models.Q(quantity__gte=0)),
            models.CheckConstraint(name="movement_stock_after_non_negative", condition=models.Q(stock_after__gte=0)),
        ]
        indexes = [
            models.Index(fields=["branch", "created_at"], name="movement_branch_created_idx"),
            models.Index(fields=["product", "variant"], name="movement_product_variant_idx"),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ImmutableRecordError("Stock movements are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError("Stock movements are append-only.")

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.movement_type} {self.quantity} product={self.product_id} variant={self.variant_id}"


# EOF
