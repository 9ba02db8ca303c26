"""Users app API views.

Endpoints include:
- signin/refresh/verify/signout: JWT session lifecycle for POS staff.
- profile: the current user's profile with role and branch.
- users (admin): list, create, update and delete staff accounts.
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken, TokenError
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView, TokenVerifyView

from .actor import ActorContext
from .logging import log_auth_event
from .models import User
from .permissions import IsPosAdmin
from .serializers import (
    EmailTokenObtainPairSerializer,
    SignOutSerializer,
    UserMeSerializer,
    UserSerializer,
    UserWriteSerializer,
)
from .services import create_user, delete_user, update_user


@extend_schema(
    operation_id="users_current_user",
    summary="Get current user profile",
    description=(
        "Returns the current authenticated user's profile.\n\n"
        "Auth: Requires JWT (Authorization: Bearer <token>) or session auth.\n\n"
        "Response fields: id, name, email, role, branch, branch_name."
    ),
    tags=["User Endpoints"],
    responses={
        200: OpenApiResponse(description="User profile", response=UserMeSerializer),
        401: OpenApiResponse(description="Unauthorized"),
    },
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
@throttle_classes([ScopedRateThrottle])
def current_user(request):
    log_auth_event("profile", request, user=request.user)
    return Response(UserMeSerializer(request.user).data)


current_user.throttle_scope = "profile"


class SignOutView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signout"
    permission_classes = [AllowAny]

    @extend_schema(tags=["User Endpoints"], request=SignOutSerializer)
    def post(self, request):
        refresh = request.data.get("refresh")
        if not refresh:
            return Response({"detail": "Refresh token is required."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            RefreshToken(refresh).blacklist()
        except TokenError:
            log_auth_event("signout", request, status="invalid_token")
            return Response({"detail": "Invalid token."}, status=status.HTTP_400_BAD_REQUEST)
        log_auth_event("signout", request, status="success")
        return Response({"detail": "Signed out."}, status=status.HTTP_205_RESET_CONTENT)


class SignInView(TokenObtainPairView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signin"
    serializer_class = EmailTokenObtainPairSerializer

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        status_label = "success" if resp.status_code == 200 else "failed"
        log_auth_event("signin", request, status=status_label, extra={"email": request.data.get("email")})
        return resp


class RefreshView(TokenRefreshView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_refresh"

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        log_auth_event("token_refresh", request, status="success" if resp.status_code == 200 else "failed")
        return resp


class VerifyView(TokenVerifyView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_verify"

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        log_auth_event("token_verify", request, status="success" if resp.status_code == 200 else "failed")
        return resp


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List users"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get user"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create user", request=UserWriteSerializer),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update user", request=UserWriteSerializer),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete user"),
)
class UserAdminViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Staff management for administrators. Writes go through ``users.services``."""

    permission_classes = [IsPosAdmin]
    serializer_class = UserSerializer
    queryset = User.objects.select_related("branch").order_by("name", "id")

    def create(self, request):
        payload = UserWriteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        user = create_user(
            actor=ActorContext.from_user(request.user),
            name=data["name"],
            email=data["email"],
            password=data.get("password") or "",
            role=data["role"],
            branch_id=data.get("branch"),
        )
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        payload = UserWriteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        user = update_user(
            actor=ActorContext.from_user(request.user),
            user_id=pk,
            name=data["name"],
            email=data["email"],
            role=data["role"],
            branch_id=data.get("branch"),
            password=data.get("password") or None,
        )
        return Response(UserSerializer(user).data)

    def destroy(self, request, pk=None):
        delete_user(actor=ActorContext.from_user(request.user), user_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
