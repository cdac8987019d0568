from apps.utils.exceptions import InvalidTransitionError, NotFoundError


class OrderNotFound(NotFoundError):
    default_message = "Order not found."
    default_code = "order_not_found"


class ItemNotFound(NotFoundError):
    default_message = "Product not found in order."
    default_code = "item_not_found"


class OrderClosed(InvalidTransitionError):
    default_message = "Order is closed."
    default_code = "order_closed"


class OrderAlreadyClosed(InvalidTransitionError):
    default_message = "Order is already closed."
    default_code = "order_already_closed"


class EmptyOrder(InvalidTransitionError):
    default_message = "Cannot close an order without products."
    default_code = "empty_order"
