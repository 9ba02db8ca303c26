"""Catalog API views.

- categories: readable by any signed-in user, writable by administrators.
- products: administrator CRUD through the provisioning services; DELETE
  deactivates and ``restore`` reactivates.
- pos-products: active products with the caller's branch stock.
"""

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import generics, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from users.actor import ActorContext
from users.permissions import IsPosAdmin, IsPosAdminOrReadOnly

from . import selectors, services
from .serializers import (
    CategorySerializer,
    PosProductSerializer,
    ProductSerializer,
    ProductWriteSerializer,
)


@extend_schema_view(
    list=extend_schema(tags=["Catalog Endpoints"], summary="List categories"),
    retrieve=extend_schema(tags=["Catalog Endpoints"], summary="Get category"),
    create=extend_schema(tags=["Catalog Endpoints"], summary="Create category"),
    update=extend_schema(tags=["Catalog Endpoints"], summary="Update category"),
    destroy=extend_schema(
        tags=["Catalog Endpoints"],
        summary="Delete category",
        description="Refused with 409 while products still reference the category.",
    ),
)
class CategoryViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsPosAdminOrReadOnly]
    serializer_class = CategorySerializer
    pagination_class = None

    def get_queryset(self):
        return selectors.list_categories()

    def create(self, request):
        payload = CategorySerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        category = services.create_category(
            actor=ActorContext.from_user(request.user),
            name=payload.validated_data["name"],
            color=payload.validated_data.get("color", ""),
        )
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        payload = CategorySerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        category = services.update_category(
            actor=ActorContext.from_user(request.user),
            category_id=pk,
            name=payload.validated_data["name"],
            color=payload.validated_data.get("color", ""),
        )
        return Response(CategorySerializer(category).data)

    def destroy(self, request, pk=None):
        services.delete_category(actor=ActorContext.from_user(request.user), category_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List products (admin)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get product (admin)"),
    create=extend_schema(
        tags=["Admin Endpoints"],
        summary="Create product",
        description="Creates the product and its variants and seeds stock at every branch.",
        request=ProductWriteSerializer,
        examples=[
            OpenApiExample(
                "Shirt with sizes",
                value={
                    "name": "T-Shirt",
                    "price": "20.00",
                    "cost": "8.50",
                    "category": 1,
                    "stock": 10,
                    "variants": [
                        {"name": "Size", "value": "M"},
                        {"name": "Size", "value": "XL", "price_adjustment": "2.00"},
                    ],
                },
                request_only=True,
            )
        ],
    ),
    update=extend_schema(
        tags=["Admin Endpoints"],
        summary="Update product",
        description=(
            "Updates product fields and reconciles variants. Existing product stock is kept; "
            "variant stock is regenerated at `stock` for every branch."
        ),
        request=ProductWriteSerializer,
    ),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Deactivate product"),
)
class ProductAdminViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsPosAdmin]
    serializer_class = ProductSerializer

    def get_queryset(self):
        return selectors.list_products()

    def create(self, request):
        payload = ProductWriteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        product = services.create_product(actor=ActorContext.from_user(request.user), **payload.to_service_kwargs())
        product = selectors.get_product(product.id)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        payload = ProductWriteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        product = services.update_product(
            actor=ActorContext.from_user(request.user), product_id=pk, **payload.to_service_kwargs()
        )
        product = selectors.get_product(product.id)
        return Response(ProductSerializer(product).data)

    def destroy(self, request, pk=None):
        services.deactivate_product(actor=ActorContext.from_user(request.user), product_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Admin Endpoints"], summary="Restore product", request=None, responses=ProductSerializer)
    @action(detail=True, methods=["post"])
    def restore(self, request, pk=None):
        product = services.restore_product(actor=ActorContext.from_user(request.user), product_id=pk)
        return Response(ProductSerializer(selectors.get_product(product.id)).data)


@extend_schema(
    tags=["Catalog Endpoints"],
    summary="List products for the POS",
    description="Active products with the stock of the caller's branch for the product and each variant.",
    parameters=[
        OpenApiParameter("search", OpenApiTypes.STR, location="query", description="Name contains or exact barcode"),
        OpenApiParameter("category", OpenApiTypes.INT, location="query", description="Filter by category id"),
        OpenApiParameter("branch", OpenApiTypes.INT, location="query", description="Branch id (admins only)"),
    ],
)
class PosProductListView(generics.ListAPIView):
    serializer_class = PosProductSerializer
    pagination_class = None

    def get_queryset(self):
        actor = ActorContext.from_user(self.request.user)
        params = self.request.query_params
        branch_id = actor.resolve_branch(_int_or_none(params.get("branch")))
        return selectors.list_pos_products(
            branch_id=branch_id,
            search=(params.get("search") or "").strip() or None,
            category_id=_int_or_none(params.get("category")),
        )


def _int_or_none(raw):
    try:
        return int(raw) if raw not in (None, "") else None
    except (TypeError, ValueError):
        return None
