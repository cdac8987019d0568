from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ('product', 'product_name', 'price', 'quantity', 'subtotal', 'created_at', 'deleted_at')

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Read-only view. Lifecycle changes go through OrderService.
    """
    list_display = ('id', 'status', 'total', 'created_at', 'closed_at')
    list_filter = ('status', 'created_at')
    search_fields = ('id',)
    readonly_fields = ('status', 'created_at', 'updated_at', 'closed_at', 'total')

    inlines = [OrderItemInline]

    def get_queryset(self, request):
        return super().get_queryset(request).with_items()

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
