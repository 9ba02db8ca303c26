"""Admin registration for the custom User model."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Django admin for POS staff, exposing role and branch assignment."""

    list_display = ("email", "name", "role", "branch", "is_active", "last_login")
    list_filter = ("role", "branch", "is_active", "is_staff")
    search_fields = ("email", "name", "username")
    ordering = ("name",)
    readonly_fields = ("last_login", "date_joined")

    fieldsets = (
        (None, {"fields": ("email", "username", "password")}),
        ("POS", {"fields": ("name", "role", "branch")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "username", "name", "role", "branch", "password1", "password2"),
            },
        ),
    )
