"""Inventory API: manual stock adjustments and read-only stock/movement lists.

Sellers only see and adjust their own branch. Admins may pass ``branch`` to
target or filter another one.
"""

from django.db.models import Q
from django_filters import rest_framework as filters
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from users.actor import ActorContext

from . import selectors
from .models import StockItem, StockMovement
from .serializers import (
    StockAdjustmentResultSerializer,
    StockAdjustmentSerializer,
    StockItemSerializer,
    StockMovementSerializer,
)
from .services import apply_movement


def _scoped_branch(request):
    """Branch filter for list views: sellers are pinned to their branch."""

    actor = ActorContext.from_user(request.user)
    raw = request.query_params.get("branch")
    if actor.is_admin:
        if raw in (None, ""):
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            return -1
    return actor.require_branch()


class StockAdjustView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "inventory_adjust"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Adjust stock",
        description=(
            "Applies one movement to a product or variant at the caller's branch.\n\n"
            "- `in`: add `quantity` (> 0)\n"
            "- `out`: remove `quantity` (> 0); 409 when stock would go negative\n"
            "- `set`: overwrite with `quantity` (>= 0)\n\n"
            "Exactly one movement is recorded per successful call."
        ),
        request=StockAdjustmentSerializer,
        responses={200: StockAdjustmentResultSerializer},
        examples=[
            OpenApiExample(
                "Receive goods",
                value={"product": 1, "movement_type": "in", "quantity": 5, "reason": "Delivery"},
                request_only=True,
            )
        ],
    )
    def post(self, request):
        payload = StockAdjustmentSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        result = apply_movement(
            actor=ActorContext.from_user(request.user),
            product_id=data["product"],
            variant_id=data.get("variant"),
            movement_type=data["movement_type"],
            quantity=data["quantity"],
            reason=data["reason"],
            branch_id=data.get("branch"),
        )
        body = StockAdjustmentResultSerializer({"stock": result.stock, "movement": result.movement}).data
        return Response(body, status=status.HTTP_200_OK)


class StockItemFilterSet(filters.FilterSet):
    product = filters.NumberFilter(method="filter_product")
    variant = filters.NumberFilter(field_name="variant_id")

    class Meta:
        model = StockItem
        fields = ["product", "variant"]

    def filter_product(self, queryset, name, value):
        # Variant rows carry no product; match them through their variant
        return queryset.filter(Q(product_id=value) | Q(variant__product_id=value))


class StockItemListView(generics.ListAPIView):
    serializer_class = StockItemSerializer
    filter_backends = [filters.DjangoFilterBackend]
    filterset_class = StockItemFilterSet

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List stock items",
        description="Current stock per product/variant and branch. Filters: product, variant, branch (admins).",
        parameters=[OpenApiParameter("branch", OpenApiTypes.INT, location="query", description="Admins only")],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        return selectors.list_stock_items(branch_id=_scoped_branch(self.request))


class MovementFilterSet(filters.FilterSet):
    product = filters.NumberFilter(field_name="product_id")
    variant = filters.NumberFilter(field_name="variant_id")
    movement_type = filters.ChoiceFilter(field_name="movement_type", choices=StockMovement.TYPE_CHOICES)
    user = filters.NumberFilter(field_name="user_id")
    created_after = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = StockMovement
        fields = ["product", "variant", "movement_type", "user"]


class MovementListView(generics.ListAPIView):
    serializer_class = StockMovementSerializer
    filter_backends = [filters.DjangoFilterBackend]
    filterset_class = MovementFilterSet

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List stock movements",
        description=(
            "Movement history, newest first. Filters: product, variant, movement_type, user, "
            "created_after/created_before (ISO), branch (admins)."
        ),
        parameters=[OpenApiParameter("branch", OpenApiTypes.INT, location="query", description="Admins only")],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        return selectors.list_movements(branch_id=_scoped_branch(self.request))


# EOF
