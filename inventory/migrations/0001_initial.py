import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("branches", "0001_initial"),
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="StockItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("stock", models.IntegerField(default=0)),
                (
                    "branch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="stock_items", to="branches.branch"
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_items",
                        to="catalog.product",
                    ),
                ),
                (
                    "variant",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_items",
                        to="catalog.productvariant",
                    ),
                ),
            ],
            options={
                "ordering": ["branch_id", "id"],
                "indexes": [
                    models.Index(fields=["branch", "product"], name="stockitem_branch_product_idx"),
                    models.Index(fields=["branch", "variant"], name="stockitem_branch_variant_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(stock__gte=0), name="stock_non_negative"),
                    models.CheckConstraint(
                        condition=models.Q(product__isnull=False, variant__isnull=True)
                        | models.Q(product__isnull=True, variant__isnull=False),
                        name="stockitem_xor_product_variant",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(variant__isnull=True),
                        fields=("product", "branch"),
                        name="unique_stockitem_per_product_branch",
                    ),
                    models.UniqueConstraint(fields=("variant", "branch"), name="unique_stockitem_per_variant_branch"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "movement_type",
                    models.CharField(
                        choices=[("in", "In"), ("out", "Out"), ("set", "Set")], db_index=True, max_length=8
                    ),
                ),
                ("quantity", models.IntegerField()),
                ("reason", models.CharField(max_length=255)),
                ("stock_before", models.IntegerField()),
                ("stock_after", models.IntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "branch",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="movements",
                        to="branches.branch",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="movements", to="catalog.product"
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "variant",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="movements",
                        to="catalog.productvariant",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["branch", "created_at"], name="movement_branch_created_idx"),
                    models.Index(fields=["product", "variant"], name="movement_product_variant_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(quantity__gte=0), name="movement_quantity_non_negative"),
                    models.CheckConstraint(
                        condition=models.Q(stock_after__gte=0), name="movement_stock_after_non_negative"
                    ),
                ],
            },
        ),
    ]
