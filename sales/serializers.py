"""Serializers for placing sales and reading the sales history."""

from decimal import Decimal

from common.choices import PaymentMethod
from rest_framework import serializers

from .models import Sale, SaleItem


class SaleItemInputSerializer(serializers.Serializer):
    product = serializers.IntegerField()
    variant = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01"), required=False, allow_null=True
    )


class SaleCreateSerializer(serializers.Serializer):
    """Input of a register sale. Business rules are enforced by ``place_sale``."""

    items = SaleItemInputSerializer(many=True, allow_empty=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    cash_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    change = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    is_table = serializers.BooleanField(required=False, default=False)
    table_number = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)

    def to_service_kwargs(self) -> dict:
        data = dict(self.validated_data)
        data["items"] = [
            {
                "product_id": item["product"],
                "variant_id": item.get("variant"),
                "quantity": item["quantity"],
                "price": item.get("price"),
            }
            for item in data["items"]
        ]
        return data


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = ["id", "product", "variant", "product_name", "variant_label", "quantity", "unit_price", "subtotal"]
        read_only_fields = fields


class SaleSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source="user.name", read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)
    items = SaleItemSerializer(many=True, read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "user",
            "user_name",
            "branch",
            "branch_name",
            "total",
            "payment_method",
            "cash_amount",
            "change",
            "is_table",
            "table_number",
            "notes",
            "created_at",
            "items",
        ]
        read_only_fields = fields
