"""Catalog app models.

Defines the sellable catalog: categories, products and product variants.
Stock is not stored here; see ``inventory.models.StockItem`` for per-branch
stock of products and variants.
"""

from decimal import Decimal

from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Category(TimeStampedModel):
    name = models.CharField(max_length=120)
    color = models.CharField(max_length=32, blank=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class Product(TimeStampedModel):
    """Sellable product. ``active`` implements soft deletion."""

    name = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    cost = models.DecimalField(max_digits=12, decimal_places=2)
    barcode = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    color = models.CharField(max_length=32, blank=True)
    image = models.CharField(max_length=500, null=True, blank=True)
    category = models.ForeignKey(Category, related_name="products", on_delete=models.PROTECT)
    active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(name="product_price_positive", condition=models.Q(price__gt=0)),
            models.CheckConstraint(name="product_cost_positive", condition=models.Q(cost__gt=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class ProductVariant(TimeStampedModel):
    """Variant of a product (e.g. size=L); priced as product price plus adjustment."""

    product = models.ForeignKey(Product, related_name="variants", on_delete=models.CASCADE)
    name = models.CharField(max_length=120)
    value = models.CharField(max_length=120)
    price_adjustment = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["product", "name", "value"], name="variant_product_name_value_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.product.name} [{self.label}]"

    @property
    def label(self) -> str:
        return f"{self.name}: {self.value}"

    @property
    def unit_price(self) -> Decimal:
        return self.product.price + (self.price_adjustment or Decimal("0.00"))
