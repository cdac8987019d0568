# apps/orders/tests.py
import uuid
from decimal import Decimal
from types import SimpleNamespace
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from apps.catalog.exceptions import ProductNotFound
from apps.catalog.models import Product
from .exceptions import EmptyOrder, ItemNotFound, OrderAlreadyClosed, OrderClosed, OrderNotFound
from .models import Order, OrderItem
from .services import OrderService
from .totals import calculate_order_total

User = get_user_model()


def _item(price, quantity, deleted=False):
    return SimpleNamespace(
        price=Decimal(price),
        quantity=quantity,
        deleted_at=timezone.now() if deleted else None,
    )


class CalculateOrderTotalTests(SimpleTestCase):

    def test_no_items_is_zero(self):
        self.assertEqual(calculate_order_total([]), Decimal("0.00"))

    def test_sums_price_times_quantity(self):
        items = [_item("10.00", 2), _item("2.50", 4)]
        self.assertEqual(calculate_order_total(items), Decimal("30.00"))

    def test_deleted_items_are_ignored(self):
        items = [_item("10.00", 2), _item("99.99", 1, deleted=True)]
        self.assertEqual(calculate_order_total(items), Decimal("20.00"))


class OrderServiceTests(TestCase):
    def setUp(self):
        self.p1 = Product.objects.create(name="Keyboard", price=Decimal("10.00"))
        self.p2 = Product.objects.create(name="Mouse", price=Decimal("5.00"))
        self.p3 = Product.objects.create(name="Cable", price=Decimal("1.25"))

    def _closed_order(self):
        order = OrderService.start_order()
        OrderService.add_product(order.id, self.p2.id, 1)
        return OrderService.close_order(order.id)

    def test_start_order_is_open_and_empty(self):
        order = OrderService.start_order()

        self.assertEqual(order.status, Order.Status.OPEN)
        self.assertIsNone(order.closed_at)
        self.assertIsNotNone(order.created_at)
        self.assertEqual(order.active_items, [])
        self.assertEqual(order.total, Decimal("0.00"))

    def test_add_new_product_creates_snapshot_item(self):
        order = OrderService.start_order()
        order = OrderService.add_product(order.id, self.p1.id, 2)

        self.assertEqual(len(order.active_items), 1)
        item = order.active_items[0]
        self.assertEqual(item.product_id, self.p1.id)
        self.assertEqual(item.product_name, "Keyboard")
        self.assertEqual(item.price, Decimal("10.00"))
        self.assertEqual(item.quantity, 2)
        self.assertEqual(order.total, Decimal("20.00"))

    def test_adding_same_product_increments_quantity(self):
        order = OrderService.start_order()
        OrderService.add_product(order.id, self.p1.id, 2)
        order = OrderService.add_product(order.id, self.p1.id, 3)

        self.assertEqual(OrderItem.objects.filter(order=order).count(), 1)
        self.assertEqual(order.active_items[0].quantity, 5)
        self.assertEqual(order.total, Decimal("50.00"))

    def test_item_keeps_price_snapshot_after_product_changes(self):
        order = OrderService.start_order()
        OrderService.add_product(order.id, self.p1.id, 1)

        self.p1.name = "Keyboard v2"
        self.p1.price = Decimal("99.00")
        self.p1.save()

        order = OrderService.get_order(order.id)
        self.assertEqual(order.active_items[0].product_name, "Keyboard")
        self.assertEqual(order.total, Decimal("10.00"))

    def test_add_to_unknown_order(self):
        with self.assertRaises(OrderNotFound):
            OrderService.add_product(uuid.uuid4(), self.p1.id, 1)

    def test_add_unknown_product(self):
        order = OrderService.start_order()
        with self.assertRaises(ProductNotFound):
            OrderService.add_product(order.id, uuid.uuid4(), 1)

    def test_add_soft_deleted_product(self):
        order = OrderService.start_order()
        self.p3.soft_delete()
        with self.assertRaises(ProductNotFound):
            OrderService.add_product(order.id, self.p3.id, 1)

    def test_add_to_closed_order_leaves_state_unchanged(self):
        order = self._closed_order()

        with self.assertRaises(OrderClosed):
            OrderService.add_product(order.id, self.p3.id, 1)
        with self.assertRaises(OrderClosed):
            OrderService.add_product(order.id, self.p2.id, 10)

        order = OrderService.get_order(order.id)
        self.assertEqual(OrderItem.objects.filter(order=order).count(), 1)
        self.assertEqual(order.active_items[0].quantity, 1)
        self.assertEqual(order.total, Decimal("5.00"))

    def test_closed_check_runs_before_product_lookup(self):
        order = self._closed_order()
        with self.assertRaises(OrderClosed):
            OrderService.add_product(order.id, uuid.uuid4(), 1)

    def test_remove_product_soft_deletes_item(self):
        order = OrderService.start_order()
        OrderService.add_product(order.id, self.p1.id, 2)
        OrderService.add_product(order.id, self.p2.id, 1)

        order = OrderService.remove_product(order.id, self.p1.id)

        self.assertEqual([i.product_id for i in order.active_items], [self.p2.id])
        self.assertEqual(order.total, Decimal("5.00"))

        stored = OrderItem.objects.get(order=order, product=self.p1)
        self.assertIsNotNone(stored.deleted_at)
        self.assertEqual(stored.quantity, 2)

    def test_remove_product_not_in_order(self):
        order = OrderService.start_order()
        with self.assertRaises(ItemNotFound):
            OrderService.remove_product(order.id, self.p1.id)

    def test_remove_twice_fails_second_time(self):
        order = OrderService.start_order()
        OrderService.add_product(order.id, self.p1.id, 1)
        OrderService.remove_product(order.id, self.p1.id)

        with self.assertRaises(ItemNotFound):
            OrderService.remove_product(order.id, self.p1.id)

    def test_remove_from_unknown_order(self):
        with self.assertRaises(OrderNotFound):
            OrderService.remove_product(uuid.uuid4(), self.p1.id)

    def test_remove_from_closed_order(self):
        order = self._closed_order()
        with self.assertRaises(OrderClosed):
            OrderService.remove_product(order.id, self.p2.id)

        order = OrderService.get_order(order.id)
        self.assertEqual(len(order.active_items), 1)

    def test_re_adding_removed_product_creates_new_line(self):
        order = OrderService.start_order()
        OrderService.add_product(order.id, self.p1.id, 4)
        OrderService.remove_product(order.id, self.p1.id)
        order = OrderService.add_product(order.id, self.p1.id, 1)

        self.assertEqual(OrderItem.objects.filter(order=order).count(), 2)
        self.assertEqual(order.active_items[0].quantity, 1)
        self.assertEqual(order.total, Decimal("10.00"))

    def test_failed_add_leaves_no_partial_write(self):
        order = OrderService.start_order()
        OrderService.add_product(order.id, self.p1.id, 2)

        with mock.patch("apps.orders.services.logger") as log:
            log.info.side_effect = RuntimeError("log sink down")
            with self.assertRaises(RuntimeError):
                OrderService.add_product(order.id, self.p1.id, 3)
            with self.assertRaises(RuntimeError):
                OrderService.add_product(order.id, self.p2.id, 1)

        order = OrderService.get_order(order.id)
        self.assertEqual(OrderItem.objects.filter(order=order).count(), 1)
        self.assertEqual(order.active_items[0].quantity, 2)
        self.assertEqual(order.total, Decimal("20.00"))

    def test_failed_remove_leaves_item_live(self):
        order = OrderService.start_order()
        OrderService.add_product(order.id, self.p1.id, 1)

        with mock.patch("apps.orders.services.logger") as log:
            log.info.side_effect = RuntimeError("log sink down")
            with self.assertRaises(RuntimeError):
                OrderService.remove_product(order.id, self.p1.id)

        stored = OrderItem.objects.get(order=order, product=self.p1)
        self.assertIsNone(stored.deleted_at)

    def test_close_empty_order(self):
        order = OrderService.start_order()
        with self.assertRaises(EmptyOrder):
            OrderService.close_order(order.id)

        order.refresh_from_db()
        self.assertEqual(order.status, Order.Status.OPEN)
        self.assertIsNone(order.closed_at)

    def test_close_order_with_only_removed_items(self):
        order = OrderService.start_order()
        OrderService.add_product(order.id, self.p1.id, 1)
        OrderService.remove_product(order.id, self.p1.id)

        with self.assertRaises(EmptyOrder):
            OrderService.close_order(order.id)

    def test_close_order(self):
        order = OrderService.start_order()
        OrderService.add_product(order.id, self.p2.id, 4)

        order = OrderService.close_order(order.id)

        self.assertEqual(order.status, Order.Status.CLOSED)
        self.assertIsNotNone(order.closed_at)
        self.assertEqual(order.total, Decimal("20.00"))

    def test_close_already_closed_order(self):
        order = self._closed_order()
        closed_at = order.closed_at

        with self.assertRaises(OrderAlreadyClosed):
            OrderService.close_order(order.id)

        order.refresh_from_db()
        self.assertEqual(order.closed_at, closed_at)

    def test_close_unknown_order(self):
        with self.assertRaises(OrderNotFound):
            OrderService.close_order(uuid.uuid4())

    def test_get_unknown_order_returns_none(self):
        self.assertIsNone(OrderService.get_order(uuid.uuid4()))

    def test_list_orders_filters_by_status(self):
        open_order = OrderService.start_order()
        closed_order = self._closed_order()

        self.assertEqual(
            {o.id for o in OrderService.list_orders()},
            {open_order.id, closed_order.id},
        )
        self.assertEqual(
            [o.id for o in OrderService.list_orders(Order.Status.CLOSED)],
            [closed_order.id],
        )
        self.assertEqual(
            [o.id for o in OrderService.list_orders(Order.Status.OPEN)],
            [open_order.id],
        )

    def test_sql_total_matches_computed_total(self):
        order = OrderService.start_order()
        OrderService.add_product(order.id, self.p1.id, 3)
        OrderService.add_product(order.id, self.p3.id, 2)
        OrderService.add_product(order.id, self.p2.id, 1)
        OrderService.remove_product(order.id, self.p2.id)
        empty = OrderService.start_order()

        annotated = {o.id: o for o in Order.objects.with_totals()}

        self.assertEqual(annotated[order.id].total_amount, Decimal("32.50"))
        self.assertEqual(annotated[order.id].total_amount, annotated[order.id].total)
        self.assertEqual(annotated[empty.id].total_amount, Decimal("0.00"))

    def test_scenario_add_increment_remove_then_close_fails(self):
        o1 = OrderService.start_order()

        o1 = OrderService.add_product(o1.id, self.p1.id, 2)
        self.assertEqual(o1.total, Decimal("20.00"))

        o1 = OrderService.add_product(o1.id, self.p1.id, 3)
        self.assertEqual(o1.active_items[0].quantity, 5)
        self.assertEqual(o1.total, Decimal("50.00"))

        o1 = OrderService.remove_product(o1.id, self.p1.id)
        self.assertEqual(o1.active_items, [])
        self.assertEqual(o1.total, Decimal("0.00"))

        with self.assertRaises(EmptyOrder):
            OrderService.close_order(o1.id)

    def test_scenario_close_then_add_fails(self):
        o2 = OrderService.start_order()
        OrderService.add_product(o2.id, self.p2.id, 4)

        o2 = OrderService.close_order(o2.id)
        self.assertEqual(o2.status, Order.Status.CLOSED)
        self.assertIsNotNone(o2.closed_at)
        self.assertEqual(o2.total, Decimal("20.00"))

        with self.assertRaises(OrderClosed):
            OrderService.add_product(o2.id, self.p3.id, 1)


class OrderConstraintTests(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Lamp", price=Decimal("7.00"))
        self.order = Order.objects.create()

    def test_closed_order_requires_closed_at(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Order.objects.create(status=Order.Status.CLOSED)

    def test_open_order_cannot_have_closed_at(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Order.objects.create(status=Order.Status.OPEN, closed_at=timezone.now())

    def test_item_quantity_must_be_positive(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                OrderItem.objects.create(
                    order=self.order, product=self.product,
                    product_name="Lamp", price=Decimal("7.00"), quantity=0,
                )

    def test_one_live_item_per_product(self):
        OrderItem.objects.create(
            order=self.order, product=self.product,
            product_name="Lamp", price=Decimal("7.00"), quantity=1,
        )
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                OrderItem.objects.create(
                    order=self.order, product=self.product,
                    product_name="Lamp", price=Decimal("7.00"), quantity=1,
                )


class OrderAPITests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(cpf="52998224725", password="testpass123")
        self.client.force_authenticate(self.user)

        self.p1 = Product.objects.create(name="Keyboard", price=Decimal("10.00"))
        self.p2 = Product.objects.create(name="Mouse", price=Decimal("5.00"))

    def _start(self):
        resp = self.client.post(reverse("order-start"))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        return resp.data["id"]

    def _add(self, order_id, product, quantity):
        url = reverse("order-add-product", kwargs={"pk": order_id})
        return self.client.post(url, {"product_id": str(product.id), "quantity": quantity}, format="json")

    def test_requires_authentication(self):
        anon = APIClient()
        resp = anon.post(reverse("order-start"))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

        resp = anon.get(reverse("order-list"))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_start_order(self):
        resp = self.client.post(reverse("order-start"))

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["status"], "OPEN")
        self.assertEqual(resp.data["status_display"], "Open")
        self.assertEqual(resp.data["items"], [])
        self.assertEqual(resp.data["total"], "0.00")
        self.assertIsNone(resp.data["closed_at"])

    def test_add_product(self):
        order_id = self._start()
        resp = self._add(order_id, self.p1, 2)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["total"], "20.00")
        self.assertEqual(len(resp.data["items"]), 1)
        item = resp.data["items"][0]
        self.assertEqual(item["product_id"], str(self.p1.id))
        self.assertEqual(item["product_name"], "Keyboard")
        self.assertEqual(item["quantity"], 2)
        self.assertEqual(item["subtotal"], "20.00")

    def test_add_product_rejects_non_positive_quantity(self):
        order_id = self._start()

        for quantity in (0, -3):
            resp = self._add(order_id, self.p1, quantity)
            self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn("quantity", resp.data)

        self.assertFalse(OrderItem.objects.exists())

    def test_add_product_rejects_bad_product_id(self):
        order_id = self._start()
        url = reverse("order-add-product", kwargs={"pk": order_id})
        resp = self.client.post(url, {"product_id": "not-a-uuid", "quantity": 1}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("product_id", resp.data)

    def test_add_product_to_unknown_order(self):
        resp = self._add(uuid.uuid4(), self.p1, 1)
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["code"], "order_not_found")

    def test_add_unknown_product(self):
        order_id = self._start()
        url = reverse("order-add-product", kwargs={"pk": order_id})
        resp = self.client.post(url, {"product_id": str(uuid.uuid4()), "quantity": 1}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["code"], "product_not_found")

    def test_remove_product(self):
        order_id = self._start()
        self._add(order_id, self.p1, 2)

        url = reverse("order-remove-product", kwargs={"pk": order_id, "product_id": str(self.p1.id)})
        resp = self.client.delete(url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["items"], [])
        self.assertEqual(resp.data["total"], "0.00")
        self.assertEqual(OrderItem.objects.count(), 1)

    def test_remove_product_not_in_order(self):
        order_id = self._start()
        url = reverse("order-remove-product", kwargs={"pk": order_id, "product_id": str(self.p2.id)})
        resp = self.client.delete(url)

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["code"], "item_not_found")

    def test_close_empty_order(self):
        order_id = self._start()
        resp = self.client.patch(reverse("order-close", kwargs={"pk": order_id}))

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "empty_order")

    def test_close_then_mutations_are_rejected(self):
        order_id = self._start()
        self._add(order_id, self.p2, 4)

        resp = self.client.patch(reverse("order-close", kwargs={"pk": order_id}))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["status"], "CLOSED")
        self.assertIsNotNone(resp.data["closed_at"])
        self.assertEqual(resp.data["total"], "20.00")

        resp = self._add(order_id, self.p1, 1)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "order_closed")

        url = reverse("order-remove-product", kwargs={"pk": order_id, "product_id": str(self.p2.id)})
        resp = self.client.delete(url)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "order_closed")

        resp = self.client.patch(reverse("order-close", kwargs={"pk": order_id}))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "order_already_closed")

    def test_retrieve_order(self):
        order_id = self._start()
        self._add(order_id, self.p1, 1)

        resp = self.client.get(reverse("order-detail", kwargs={"pk": order_id}))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["id"], order_id)
        self.assertEqual(resp.data["total"], "10.00")

    def test_retrieve_unknown_order(self):
        resp = self.client.get(reverse("order-detail", kwargs={"pk": uuid.uuid4()}))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_orders_paginated_with_totals(self):
        first = self._start()
        self._add(first, self.p1, 1)
        self._start()

        resp = self.client.get(reverse("order-list"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["count"], 2)
        self.assertEqual(resp.data["page"], 1)
        totals = {o["id"]: o["total"] for o in resp.data["results"]}
        self.assertEqual(totals[first], "10.00")

    def test_list_orders_filters(self):
        big = self._start()
        self._add(big, self.p1, 5)
        self.client.patch(reverse("order-close", kwargs={"pk": big}))

        small = self._start()
        self._add(small, self.p2, 1)

        url = reverse("order-list")

        resp = self.client.get(url, {"status": "CLOSED"})
        self.assertEqual([o["id"] for o in resp.data["results"]], [big])

        resp = self.client.get(url, {"min_total": "10"})
        self.assertEqual([o["id"] for o in resp.data["results"]], [big])

        resp = self.client.get(url, {"max_total": "5.00"})
        self.assertEqual([o["id"] for o in resp.data["results"]], [small])

        resp = self.client.get(url, {"date": timezone.localdate().isoformat()})
        self.assertEqual(resp.data["count"], 2)

    def test_list_orders_rejects_unknown_status(self):
        resp = self.client.get(reverse("order-list"), {"status": "SHIPPED"})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_malformed_ids_are_not_found(self):
        order_id = self._start()
        bad = "a" * 36

        resp = self.client.get(f"/api/v1/orders/{bad}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        resp = self.client.delete(f"/api/v1/orders/{order_id}/products/{bad}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        resp = self.client.post(f"/api/v1/orders/{bad}/products/", {"product_id": str(self.p1.id), "quantity": 1}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
