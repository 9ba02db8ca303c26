from django.contrib import admin

from .models import IdempotencyKey, Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "variant", "product_name", "variant_label", "quantity", "unit_price", "subtotal")


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ("id", "branch", "user", "total", "payment_method", "is_table", "created_at")
    list_filter = ("payment_method", "branch")
    inlines = [SaleItemInline]

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(IdempotencyKey)
class IdempotencyKeyAdmin(admin.ModelAdmin):
    list_display = ("key", "scope", "path", "method", "response_code", "expires_at")
    search_fields = ("key", "scope")
