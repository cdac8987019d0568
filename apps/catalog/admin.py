# apps/catalog/admin.py
from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "price", "created_at", "updated_at", "deleted_at")
    list_filter = ("deleted_at",)
    search_fields = ("name",)
    readonly_fields = ("created_at", "updated_at", "deleted_at")
    ordering = ("-created_at",)

    def has_delete_permission(self, request, obj=None):
        # Products are soft-deleted through the API only
        return False
