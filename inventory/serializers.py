"""Serializers for the inventory domain.

Read serializers for stock rows and movements, plus the input of a manual
stock adjustment. The adjustment itself is applied by ``inventory.services``.
"""

from common.choices import MovementType
from rest_framework import serializers

from .models import StockItem, StockMovement


class StockItemSerializer(serializers.ModelSerializer):
    """Current stock of one product or variant at one branch."""

    product_id = serializers.SerializerMethodField()
    product_name = serializers.SerializerMethodField()
    variant_label = serializers.CharField(source="variant.label", read_only=True, default=None)
    branch_name = serializers.CharField(source="branch.name", read_only=True)

    class Meta:
        model = StockItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "variant",
            "variant_label",
            "branch",
            "branch_name",
            "stock",
            "updated_at",
        ]
        read_only_fields = fields

    def get_product_id(self, obj) -> int:
        return obj.variant.product_id if obj.variant_id else obj.product_id

    def get_product_name(self, obj) -> str:
        return obj.variant.product.name if obj.variant_id else obj.product.name


class StockMovementSerializer(serializers.ModelSerializer):
    """Read-only representation of one ledger entry."""

    product_name = serializers.CharField(source="product.name", read_only=True)
    variant_label = serializers.CharField(source="variant.label", read_only=True, default=None)
    user_name = serializers.CharField(source="user.name", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "product_name",
            "variant",
            "variant_label",
            "branch",
            "user",
            "user_name",
            "movement_type",
            "quantity",
            "reason",
            "stock_before",
            "stock_after",
            "created_at",
        ]
        read_only_fields = fields


class StockAdjustmentSerializer(serializers.Serializer):
    # Quantity rules per movement type are enforced by the service
    product = serializers.IntegerField()
    variant = serializers.IntegerField(required=False, allow_null=True)
    movement_type = serializers.ChoiceField(choices=MovementType.choices)
    quantity = serializers.IntegerField()
    reason = serializers.CharField(max_length=255)
    branch = serializers.IntegerField(required=False, allow_null=True)


class StockAdjustmentResultSerializer(serializers.Serializer):
    stock = serializers.IntegerField()
    movement = StockMovementSerializer()


# EOF
