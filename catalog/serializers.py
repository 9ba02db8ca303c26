"""Serializers for the catalog app.

Write serializers only validate shape; persistence and stock seeding happen in
``catalog.services``.
"""

from decimal import Decimal

from rest_framework import serializers

from .models import Category, Product, ProductVariant


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "color"]


class ProductVariantSerializer(serializers.ModelSerializer):
    label = serializers.CharField(read_only=True)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = ProductVariant
        fields = ["id", "name", "value", "price_adjustment", "label", "unit_price"]


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True)
    variants = ProductVariantSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "price",
            "cost",
            "barcode",
            "color",
            "image",
            "category",
            "category_name",
            "active",
            "variants",
        ]
        read_only_fields = fields


class PosVariantSerializer(ProductVariantSerializer):
    branch_stock = serializers.IntegerField(read_only=True)

    class Meta(ProductVariantSerializer.Meta):
        fields = ProductVariantSerializer.Meta.fields + ["branch_stock"]


class PosProductSerializer(serializers.ModelSerializer):
    """Product as shown at the register: price, branch stock and variants."""

    category_name = serializers.CharField(source="category.name", read_only=True)
    branch_stock = serializers.IntegerField(read_only=True)
    variants = PosVariantSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = ["id", "name", "price", "barcode", "color", "image", "category", "category_name", "branch_stock", "variants"]
        read_only_fields = fields


class VariantInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    value = serializers.CharField(max_length=120)
    price_adjustment = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=Decimal("0.00"))


class ProductWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    category = serializers.IntegerField()
    stock = serializers.IntegerField(min_value=0)
    color = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    barcode = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    image = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
    variants = VariantInputSerializer(many=True, required=False, default=list)

    def to_service_kwargs(self) -> dict:
        data = dict(self.validated_data)
        data["category_id"] = data.pop("category")
        data["variants"] = [dict(v) for v in data.get("variants", [])]
        return data
