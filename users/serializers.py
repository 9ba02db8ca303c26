"""Serializers for sign-in, the current profile and admin user management."""

from common.choices import UserRole
from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User


class UserMeSerializer(serializers.ModelSerializer):
    """Profile of the authenticated user, including role and branch."""

    branch_name = serializers.CharField(source="branch.name", read_only=True, default=None)

    class Meta:
        model = User
        fields = ["id", "name", "email", "role", "branch", "branch_name"]
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    """Read representation for admin user listings."""

    class Meta:
        model = User
        fields = ["id", "name", "email", "role", "branch", "is_active", "date_joined"]
        read_only_fields = fields


class UserWriteSerializer(serializers.Serializer):
    """Input for creating or updating a user; persistence is done by services."""

    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, min_length=6)
    role = serializers.ChoiceField(choices=UserRole.choices)
    branch = serializers.IntegerField(required=False, allow_null=True)


class SignOutSerializer(serializers.Serializer):
    """Request body for signing out (blacklisting the refresh token)."""

    refresh = serializers.CharField()


class EmailTokenObtainPairSerializer(serializers.Serializer):
    """Obtain JWTs with an email and password.

    Returns ``access`` and ``refresh`` tokens plus the user's role and branch so
    the POS client can route sellers and admins without a second request.
    """

    email = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        email = (attrs.get("email") or "").strip().lower()
        password = attrs.get("password") or ""

        if not email or not password:
            raise serializers.ValidationError({"detail": "email and password are required."})

        try:
            user = User.objects.get(email=email)
        except User.DoesNotExist:
            user = None

        if not user or not user.check_password(password) or not user.is_active:
            raise serializers.ValidationError({"detail": "Invalid credentials."})

        refresh = RefreshToken.for_user(user)
        refresh["role"] = user.role
        refresh["branch_id"] = user.branch_id
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
            "role": user.role,
            "branch_id": user.branch_id,
        }
