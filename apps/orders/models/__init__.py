"""
Orders app models.

    from apps.orders.models import Order, OrderItem
"""

from .order import Order, OrderQuerySet
from .item import OrderItem

__all__ = ["Order", "OrderItem", "OrderQuerySet"]
