"""Admin registrations for inventory app.

Stock rows and movements are read-only here; stock changes go through the
adjust endpoint.
"""

from django.contrib import admin

from .models import StockItem, StockMovement


@admin.register(StockItem)
class StockItemAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "variant", "branch", "stock", "updated_at")
    list_filter = ("branch",)
    search_fields = ("product__name", "variant__product__name")
    readonly_fields = ("product", "variant", "branch", "stock", "created_at", "updated_at")

    # Stock is changed only through apply_movement
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "variant", "branch", "movement_type", "quantity", "stock_after", "created_at")
    list_filter = ("movement_type", "branch")
    search_fields = ("product__name", "reason")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# EOF
