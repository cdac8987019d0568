from apps.utils.exceptions import NotFoundError


class ProductNotFound(NotFoundError):
    default_message = "Product not found."
    default_code = "product_not_found"
