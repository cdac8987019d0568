# apps/catalog/tests.py
import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from .exceptions import ProductNotFound
from .models import Product
from .services import ProductService

User = get_user_model()


class ProductServiceTests(TestCase):
    def test_create_and_get(self):
        product = ProductService.create_product("Notebook", Decimal("12.90"))

        fetched = ProductService.get_product(product.id)
        self.assertEqual(fetched.name, "Notebook")
        self.assertEqual(fetched.price, Decimal("12.90"))

    def test_get_unknown_returns_none(self):
        self.assertIsNone(ProductService.get_product(uuid.uuid4()))

    def test_update_product(self):
        product = ProductService.create_product("Pen", Decimal("1.00"))

        updated = ProductService.update_product(product.id, "Blue Pen", Decimal("1.50"))

        self.assertEqual(updated.name, "Blue Pen")
        product.refresh_from_db()
        self.assertEqual(product.price, Decimal("1.50"))

    def test_update_unknown_product(self):
        with self.assertRaises(ProductNotFound):
            ProductService.update_product(uuid.uuid4(), "Ghost", Decimal("1.00"))

    def test_delete_is_soft_and_hides_product(self):
        product = ProductService.create_product("Eraser", Decimal("0.80"))

        self.assertTrue(ProductService.delete_product(product.id))

        self.assertIsNone(ProductService.get_product(product.id))
        self.assertNotIn(product, ProductService.list_products())
        stored = Product.objects.get(pk=product.id)
        self.assertTrue(stored.is_deleted)

    def test_delete_twice_returns_false(self):
        product = ProductService.create_product("Ruler", Decimal("2.00"))
        ProductService.delete_product(product.id)

        self.assertFalse(ProductService.delete_product(product.id))

    def test_deleted_product_cannot_be_updated(self):
        product = ProductService.create_product("Glue", Decimal("3.00"))
        ProductService.delete_product(product.id)

        with self.assertRaises(ProductNotFound):
            ProductService.update_product(product.id, "Glue", Decimal("4.00"))

    def test_negative_price_rejected_by_database(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Product.objects.create(name="Broken", price=Decimal("-1.00"))


class ProductViewSetTests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(cpf="52998224725", password="testpass123")

        self.product = Product.objects.create(name="Stapler", price=Decimal("25.00"))
        self.deleted = Product.objects.create(name="Old Stapler", price=Decimal("20.00"))
        self.deleted.soft_delete()

    def test_public_list_hides_deleted_products(self):
        resp = self.client.get(reverse("product-list"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["count"], 1)
        self.assertEqual(resp.data["results"][0]["name"], "Stapler")
        self.assertEqual(resp.data["results"][0]["price"], "25.00")

    def test_retrieve(self):
        resp = self.client.get(reverse("product-detail", kwargs={"pk": self.product.id}))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["id"], str(self.product.id))

    def test_retrieve_deleted_is_404(self):
        resp = self.client.get(reverse("product-detail", kwargs={"pk": self.deleted.id}))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["code"], "product_not_found")

    def test_create_requires_authentication(self):
        resp = self.client.post(reverse("product-list"), {"name": "Tape", "price": "3.00"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create(self):
        self.client.force_authenticate(self.user)
        resp = self.client.post(reverse("product-list"), {"name": "Tape", "price": "3.00"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["name"], "Tape")
        self.assertTrue(Product.objects.filter(name="Tape").exists())

    def test_create_validation(self):
        self.client.force_authenticate(self.user)
        url = reverse("product-list")

        resp = self.client.post(url, {"name": "", "price": "3.00"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("name", resp.data)

        resp = self.client.post(url, {"name": "x" * 101, "price": "3.00"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("name", resp.data)

        resp = self.client.post(url, {"name": "Free", "price": "0"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("price", resp.data)

        self.assertEqual(Product.objects.alive().count(), 1)

    def test_update(self):
        self.client.force_authenticate(self.user)
        url = reverse("product-detail", kwargs={"pk": self.product.id})

        resp = self.client.put(url, {"name": "Heavy Stapler", "price": "30.00"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["price"], "30.00")

    def test_update_unknown(self):
        self.client.force_authenticate(self.user)
        url = reverse("product-detail", kwargs={"pk": uuid.uuid4()})

        resp = self.client.put(url, {"name": "Ghost", "price": "1.00"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete(self):
        self.client.force_authenticate(self.user)
        url = reverse("product-detail", kwargs={"pk": self.product.id})

        resp = self.client.delete(url)
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)

        resp = self.client.delete(url)
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["code"], "product_not_found")

        resp = self.client.get(reverse("product-list"))
        self.assertEqual(resp.data["count"], 0)

    def test_malformed_id_is_not_found(self):
        resp = self.client.get(f"/api/v1/products/{'a' * 36}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
