from decimal import Decimal

from django.db import models
from django.db.models import DecimalField, ExpressionWrapper, F, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.utils.models import TimestampedModel
from ..totals import calculate_order_total

AMOUNT_FIELD = DecimalField(max_digits=12, decimal_places=2)


class OrderQuerySet(models.QuerySet):

    def with_items(self):
        return self.prefetch_related("items")

    def with_status(self, status):
        return self.filter(status=status)

    def with_totals(self):
        """
        Annotates total_amount (live items only) so totals can be filtered in SQL.
        The serialized total still comes from Order.total.
        """
        line_total = ExpressionWrapper(
            F("items__price") * F("items__quantity"),
            output_field=AMOUNT_FIELD,
        )
        return self.annotate(
            total_amount=Coalesce(
                Sum(line_total, filter=Q(items__deleted_at__isnull=True)),
                Value(Decimal("0.00")),
                output_field=AMOUNT_FIELD,
            )
        )


class Order(TimestampedModel):
    class Status(models.TextChoices):
        OPEN = "OPEN", "Open"
        CLOSED = "CLOSED", "Closed"

    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN, db_index=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status="OPEN", closed_at__isnull=True)
                    | Q(status="CLOSED", closed_at__isnull=False)
                ),
                name="order_closed_at_matches_status",
            )
        ]

    def __str__(self):
        return f"{self.id} [{self.status}]"

    @property
    def is_open(self):
        return self.status == self.Status.OPEN

    @property
    def active_items(self):
        # Filter in Python so a prefetched items cache is reused
        return [item for item in self.items.all() if item.deleted_at is None]

    @property
    def total(self):
        return calculate_order_total(self.items.all())

    def mark_closed(self):
        self.status = self.Status.CLOSED
        self.closed_at = timezone.now()
