from django.db import models
from django.db.models import Q

from apps.utils.models import TimestampedModel, SoftDeleteModel
from .order import Order


class OrderItem(TimestampedModel, SoftDeleteModel):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey("catalog.Product", on_delete=models.PROTECT, related_name='order_items')

    # Snapshot fields, copied from the product when it is first added
    product_name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=10, decimal_places=2)

    quantity = models.PositiveIntegerField()

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name="order_item_quantity_positive",
            ),
            models.UniqueConstraint(
                fields=["order", "product"],
                condition=Q(deleted_at__isnull=True),
                name="unique_live_item_per_product",
            ),
        ]

    @property
    def subtotal(self):
        return self.price * self.quantity

    def __str__(self):
        return f"{self.quantity}x {self.product_name}"
