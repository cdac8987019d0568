import logging
from decimal import Decimal
from typing import Optional

from django.db import transaction

from .exceptions import ProductNotFound
from .models import Product

logger = logging.getLogger(__name__)


class ProductService:
    """
    Plain CRUD over the catalog. Soft-deleted products are invisible everywhere.
    """

    @staticmethod
    def list_products():
        return Product.objects.alive()

    @staticmethod
    def get_product(product_id) -> Optional[Product]:
        return Product.objects.alive().filter(pk=product_id).first()

    @staticmethod
    def create_product(name: str, price: Decimal) -> Product:
        product = Product.objects.create(name=name, price=price)
        logger.info(f"Product created: {product.name}", extra={"product_id": product.pk})
        return product

    @staticmethod
    @transaction.atomic
    def update_product(product_id, name: str, price: Decimal) -> Product:
        product = Product.objects.alive().select_for_update().filter(pk=product_id).first()
        if product is None:
            raise ProductNotFound()

        product.name = name
        product.price = price
        product.save(update_fields=["name", "price", "updated_at"])
        return product

    @staticmethod
    @transaction.atomic
    def delete_product(product_id) -> bool:
        """
        Soft-delete. Returns False when there was nothing live to delete.
        """
        product = Product.objects.alive().select_for_update().filter(pk=product_id).first()
        if product is None:
            return False

        product.soft_delete()
        logger.info(f"Product deleted: {product.name}", extra={"product_id": product.pk})
        return True
