"""Sales API: place a sale, list the latest sales and read one sale.

Placing a sale is idempotent when the client sends an ``Idempotency-Key``
header, so a register that retries after a timeout does not sell twice.
"""

from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.response import Response
from users.actor import ActorContext

from . import selectors
from .serializers import SaleCreateSerializer, SaleSerializer
from .services import compute_request_hash, place_sale, with_idempotency


@extend_schema_view(
    list=extend_schema(
        tags=["Sales"],
        summary="List recent sales",
        description="Latest sales, newest first. Admins see all branches, sellers their own.",
    ),
    retrieve=extend_schema(tags=["Sales"], summary="Get sale"),
)
class SaleViewSet(viewsets.GenericViewSet):
    serializer_class = SaleSerializer
    throttle_scope = "sales"

    def get_throttles(self):
        if self.action == "create":
            self.throttle_scope = "sales_write"
        return super().get_throttles()

    def list(self, request):
        actor = ActorContext.from_user(request.user)
        sales = selectors.list_recent_sales(actor)
        return Response(SaleSerializer(sales, many=True).data)

    def retrieve(self, request, pk=None):
        sale = selectors.get_sale(ActorContext.from_user(request.user), pk)
        return Response(SaleSerializer(sale).data)

    @extend_schema(
        tags=["Sales"],
        summary="Place sale",
        description=(
            "Records a sale at the caller's branch and takes every line out of stock in one transaction. "
            "If any line fails nothing is recorded; the error names the failing line.\n\n"
            "Idempotent when `Idempotency-Key` is provided. Returns 409 on key reuse with a different payload."
        ),
        request=SaleCreateSerializer,
        responses={201: SaleSerializer},
        parameters=[
            OpenApiParameter(
                name="Idempotency-Key",
                location=OpenApiParameter.HEADER,
                required=False,
                description="Makes the request idempotent within scope+path+method",
                type=str,
            )
        ],
        examples=[
            OpenApiExample(
                "Cash sale",
                value={
                    "items": [{"product": 1, "quantity": 2}, {"product": 2, "variant": 5, "quantity": 1}],
                    "payment_method": "cash",
                    "cash_amount": "50.00",
                },
                request_only=True,
            ),
            OpenApiExample(
                "Insufficient stock",
                value={"detail": "Line 2: Insufficient stock for Tea: 1 available, 5 requested.", "code": "insufficient_stock"},
                response_only=True,
                status_codes=["409"],
            ),
        ],
    )
    def create(self, request):
        actor = ActorContext.from_user(request.user)
        payload = SaleCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        def _handler():
            sale = place_sale(actor=actor, **payload.to_service_kwargs())
            sale = selectors.get_sale(actor, sale.id)
            return SaleSerializer(sale).data, status.HTTP_201_CREATED

        idem_key = request.headers.get("Idempotency-Key")
        if idem_key:
            body, code = with_idempotency(
                key=idem_key,
                user=request.user,
                path=str(request.path),
                method=str(request.method),
                request_hash=compute_request_hash(getattr(request, "data", None)),
                handler=_handler,
            )
            return Response(body, status=code)

        body, code = _handler()
        return Response(body, status=code)
