"""DRF permission classes based on the POS role."""

from rest_framework.permissions import SAFE_METHODS, BasePermission


class IsPosAdmin(BasePermission):
    """Allow only authenticated users with the ``admin`` role."""

    message = "Only administrators can perform this action."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "is_pos_admin", False))


class IsPosAdminOrReadOnly(IsPosAdmin):
    """Reads for any authenticated user, writes for admins."""

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)
