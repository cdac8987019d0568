# apps/catalog/models.py
from django.core.validators import MinValueValidator
from django.db import models

from apps.utils.models import TimestampedModel, SoftDeleteModel


class Product(TimestampedModel, SoftDeleteModel):
    """
    Sellable product. Orders copy name and price at add-time,
    so editing a product never rewrites existing order items.
    """
    name = models.CharField(max_length=100)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="product_price_non_negative",
            )
        ]

    def __str__(self):
        return f"{self.name} ({self.price})"
