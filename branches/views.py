"""Branch administration API. Writes go through ``branches.services``."""

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.response import Response
from users.actor import ActorContext
from users.permissions import IsPosAdmin

from . import selectors, services
from .serializers import BranchSerializer


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List branches"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get branch"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create branch"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update branch"),
    destroy=extend_schema(
        tags=["Admin Endpoints"],
        summary="Delete branch",
        description="Refused with 409 while users or sales reference the branch.",
    ),
)
class BranchViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsPosAdmin]
    serializer_class = BranchSerializer
    pagination_class = None

    def get_queryset(self):
        return selectors.list_branches()

    def create(self, request):
        payload = BranchSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        branch = services.create_branch(
            actor=ActorContext.from_user(request.user),
            name=payload.validated_data["name"],
            address=payload.validated_data.get("address"),
        )
        return Response(BranchSerializer(branch).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        payload = BranchSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        branch = services.update_branch(
            actor=ActorContext.from_user(request.user),
            branch_id=pk,
            name=payload.validated_data["name"],
            address=payload.validated_data.get("address"),
        )
        return Response(BranchSerializer(branch).data)

    def destroy(self, request, pk=None):
        services.delete_branch(actor=ActorContext.from_user(request.user), branch_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
