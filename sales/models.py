from common.choices import PaymentMethod
from django.conf import settings
from django.db import models
from inventory.models import ImmutableRecordError


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class AppendOnlyMixin:
    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ImmutableRecordError(f"{type(self).__name__} records are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError(f"{type(self).__name__} records are append-only.")


class Sale(AppendOnlyMixin, TimeStampedModel):
    """A completed register sale at one branch.

    Totals and payment details are stored as submitted (after validation) for
    the sales history; stock effects live in the inventory movement ledger.
    """

    PAYMENT_CASH = PaymentMethod.CASH
    PAYMENT_CHOICES = PaymentMethod.choices

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="sales", on_delete=models.PROTECT)
    branch = models.ForeignKey("branches.Branch", related_name="sales", on_delete=models.PROTECT)
    total = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=16, choices=PAYMENT_CHOICES)
    cash_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    change = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    is_table = models.BooleanField(default=False)
    table_number = models.CharField(max_length=32, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["branch", "created_at"], name="sale_branch_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(name="sale_total_positive", condition=models.Q(total__gt=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Sale#{self.id} branch={self.branch_id} total={self.total}"


class SaleItem(AppendOnlyMixin, TimeStampedModel):
    """Line of a sale. Snapshots the product name, variant label and unit price."""

    sale = models.ForeignKey(Sale, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey("catalog.Product", related_name="sale_items", on_delete=models.PROTECT)
    variant = models.ForeignKey(
        "catalog.ProductVariant", null=True, blank=True, related_name="sale_items", on_delete=models.SET_NULL
    )
    product_name = models.CharField(max_length=200, blank=True)
    variant_label = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(name="saleitem_quantity_positive", condition=models.Q(quantity__gt=0)),
            models.CheckConstraint(name="saleitem_price_positive", condition=models.Q(unit_price__gt=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"SaleItem#{self.id} sale={self.sale_id} product={self.product_id} qty={self.quantity}"


class IdempotencyKey(TimeStampedModel):
    """Stores the response of a sale submission so a resubmission is not processed twice."""

    key = models.CharField(max_length=128)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.CASCADE)
    scope = models.CharField(max_length=128)
    path = models.CharField(max_length=255)
    method = models.CharField(max_length=16)
    request_hash = models.CharField(max_length=64, null=True, blank=True)
    response_code = models.IntegerField(null=True, blank=True)
    response_json = models.JSONField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["key", "scope", "path", "method"], name="uniq_idem_scope_path_method"),
        ]
