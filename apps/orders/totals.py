from decimal import Decimal
from typing import Iterable


def calculate_order_total(items: Iterable) -> Decimal:
    """
    Sum of price * quantity over items that are not soft-deleted.
    Pure: reads the items, never writes. The total is never stored.
    """
    return sum(
        (item.price * item.quantity for item in items if item.deleted_at is None),
        Decimal("0.00"),
    )
