import json
import logging
from unittest import mock

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.utils import DatabaseError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import serializers, status
from rest_framework.exceptions import ValidationError

from .exceptions import (
    BusinessLogicException,
    InvalidTransitionError,
    NotFoundError,
    custom_exception_handler,
)
from .logging import JSONFormatter
from .validators import is_valid_cpf, normalize_cpf, validate_cpf


class CPFValidatorTests(SimpleTestCase):
    def test_normalize_strips_mask(self):
        self.assertEqual(normalize_cpf("529.982.247-25"), "52998224725")
        self.assertEqual(normalize_cpf(None), "")

    def test_valid_cpfs(self):
        for cpf in ("52998224725", "529.982.247-25", "11144477735"):
            self.assertTrue(is_valid_cpf(cpf), cpf)

    def test_invalid_cpfs(self):
        for cpf in ("12345678900", "52998224724", "11111111111", "5299822472", "", "abc"):
            self.assertFalse(is_valid_cpf(cpf), cpf)

    def test_validate_cpf_returns_digits(self):
        self.assertEqual(validate_cpf("111.444.777-35"), "11144477735")
        with self.assertRaises(serializers.ValidationError):
            validate_cpf("00000000000")


class ExceptionHandlerTests(SimpleTestCase):
    def test_business_error_shape(self):
        resp = custom_exception_handler(InvalidTransitionError("Order is closed.", "order_closed"), {})

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data, {"error": "Order is closed.", "code": "order_closed"})

    def test_not_found_defaults(self):
        resp = custom_exception_handler(NotFoundError(), {})

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["code"], "not_found")

    def test_default_message(self):
        exc = BusinessLogicException()
        self.assertEqual(str(exc), "Business rule violated.")

    def test_drf_errors_pass_through(self):
        resp = custom_exception_handler(ValidationError({"quantity": ["Too small."]}), {})

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("quantity", resp.data)

    def test_model_validation_error_is_400(self):
        resp = custom_exception_handler(DjangoValidationError("\"aaaa\" is not a valid UUID."), {})

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data, ["\"aaaa\" is not a valid UUID."])

    def test_unexpected_error_is_opaque_500(self):
        with self.assertLogs("apps.utils.exceptions", level="ERROR"):
            resp = custom_exception_handler(RuntimeError("db password leaked"), {})

        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resp.data, {"error": "Internal Server Error", "code": "server_error"})


class JSONFormatterTests(SimpleTestCase):
    def _record(self, msg, **extra):
        record = logging.LogRecord("apps.orders", logging.INFO, __file__, 1, msg, None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_scrubs_sensitive_keys(self):
        record = self._record({"cpf": "52998224725", "nested": {"password": "x"}, "quantity": 2})

        out = json.loads(JSONFormatter().format(record))

        self.assertNotIn("52998224725", out["msg"])
        self.assertIn("***REDACTED***", out["msg"])
        self.assertIn("'quantity': 2", out["msg"])

    def test_includes_context_ids(self):
        record = self._record("Order closed", order_id="abc", product_id="def")

        out = json.loads(JSONFormatter().format(record))

        self.assertEqual(out["lvl"], "INFO")
        self.assertEqual(out["order_id"], "abc")
        self.assertEqual(out["product_id"], "def")
        self.assertNotIn("user_id", out)


class HealthAndInfoTests(TestCase):
    def test_health_ok(self):
        resp = self.client.get(reverse("health-check"))

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["components"]["db"], "ok")

    def test_health_db_down(self):
        with mock.patch("apps.utils.health.connection") as conn:
            conn.cursor.side_effect = DatabaseError("down")
            with self.assertLogs("apps.utils.health", level="ERROR"):
                resp = self.client.get(reverse("health-check"))

        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["status"], "error")

    def test_server_info(self):
        resp = self.client.get(reverse("server-info"))

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["app_name"], "Order Management")
