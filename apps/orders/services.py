import logging
from typing import Optional

from django.db import transaction
from django.db.models import F

from apps.catalog.exceptions import ProductNotFound
from apps.catalog.services import ProductService
from .exceptions import EmptyOrder, ItemNotFound, OrderAlreadyClosed, OrderClosed, OrderNotFound
from .models import Order, OrderItem

logger = logging.getLogger(__name__)


class OrderService:
    """
    Order lifecycle: OPEN -> CLOSED.

    Every mutation is one atomic read-modify-write with the order row locked,
    so a failed or cancelled request leaves nothing half-applied.
    Checks run in a fixed order: order exists, order is open, product/item exists.
    """

    @staticmethod
    def _lock_order(order_id) -> Order:
        order = Order.objects.select_for_update().filter(pk=order_id).first()
        if order is None:
            raise OrderNotFound()
        return order

    @staticmethod
    def _ensure_open(order: Order, message: str):
        if not order.is_open:
            logger.warning(f"Rejected change on closed order: {message}", extra={"order_id": order.pk})
            raise OrderClosed(message)

    @staticmethod
    def get_order(order_id) -> Optional[Order]:
        return Order.objects.with_items().filter(pk=order_id).first()

    @staticmethod
    def list_orders(status: Optional[str] = None):
        orders = Order.objects.with_items()
        if status:
            orders = orders.with_status(status)
        return orders

    @staticmethod
    def start_order() -> Order:
        order = Order.objects.create(status=Order.Status.OPEN)
        logger.info("Order started", extra={"order_id": order.pk})
        return OrderService.get_order(order.pk)

    @staticmethod
    @transaction.atomic
    def add_product(order_id, product_id, quantity: int) -> Order:
        """
        Adds `quantity` units of a product. A product already in the order
        gets its quantity bumped instead of a second line.
        """
        order = OrderService._lock_order(order_id)
        OrderService._ensure_open(order, "Cannot add products to a closed order.")

        product = ProductService.get_product(product_id)
        if product is None:
            raise ProductNotFound()

        item = order.items.alive().filter(product=product).first()
        if item is not None:
            item.quantity = F("quantity") + quantity
            item.save(update_fields=["quantity", "updated_at"])
        else:
            OrderItem.objects.create(
                order=order,
                product=product,
                product_name=product.name,
                price=product.price,
                quantity=quantity,
            )

        order.save(update_fields=["updated_at"])
        logger.info(f"Added {quantity}x {product.name}", extra={"order_id": order.pk, "product_id": product.pk})
        return OrderService.get_order(order.pk)

    @staticmethod
    @transaction.atomic
    def remove_product(order_id, product_id) -> Order:
        order = OrderService._lock_order(order_id)
        OrderService._ensure_open(order, "Cannot remove products from a closed order.")

        item = order.items.alive().filter(product_id=product_id).first()
        if item is None:
            raise ItemNotFound()

        item.soft_delete()
        order.save(update_fields=["updated_at"])
        logger.info(f"Removed {item.product_name}", extra={"order_id": order.pk, "product_id": product_id})
        return OrderService.get_order(order.pk)

    @staticmethod
    @transaction.atomic
    def close_order(order_id) -> Order:
        order = OrderService._lock_order(order_id)

        if not order.is_open:
            logger.warning("Rejected close of closed order", extra={"order_id": order.pk})
            raise OrderAlreadyClosed()

        if not order.items.alive().exists():
            logger.warning("Rejected close of empty order", extra={"order_id": order.pk})
            raise EmptyOrder()

        order.mark_closed()
        order.save(update_fields=["status", "closed_at", "updated_at"])
        logger.info("Order closed", extra={"order_id": order.pk})
        return OrderService.get_order(order.pk)
