# apps/accounts/tests.py
from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from .exceptions import DuplicateIdentifier, InvalidCredentials, InvalidRefreshToken, UserNotFound
from .models import User
from .services import AuthService

CPF = "52998224725"
OTHER_CPF = "11144477735"


class UserManagerTests(TestCase):
    def test_create_user_normalizes_cpf(self):
        user = User.objects.create_user(cpf="529.982.247-25", password="secret1")

        self.assertEqual(user.cpf, CPF)
        self.assertTrue(user.check_password("secret1"))
        self.assertFalse(user.is_staff)

    def test_create_superuser(self):
        admin = User.objects.create_superuser(cpf=OTHER_CPF, password="secret1")
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_superuser)

    def test_get_by_cpf_accepts_masked_input(self):
        user = User.objects.create_user(cpf=CPF, password="secret1")
        self.assertEqual(User.objects.get_by_cpf("529.982.247-25"), user)


class AuthServiceTests(TestCase):
    def test_register_issues_tokens(self):
        result = AuthService.register(CPF, "secret1")

        user = result["user"]
        self.assertEqual(user.cpf, CPF)
        self.assertTrue(result["access_token"])
        self.assertEqual(user.refresh_token, result["refresh_token"])
        self.assertGreater(result["expiration"], timezone.now())
        self.assertGreater(user.refresh_token_expires_at, timezone.now() + timedelta(days=6))

    def test_register_duplicate_cpf(self):
        AuthService.register(CPF, "secret1")
        with self.assertRaises(DuplicateIdentifier):
            AuthService.register("529.982.247-25", "another")

    def test_authenticate(self):
        AuthService.register(CPF, "secret1")

        result = AuthService.authenticate(CPF, "secret1")

        self.assertEqual(AuthService.validate_token(result["access_token"]), str(result["user"].pk))
        self.assertIsNotNone(User.objects.get(cpf=CPF).last_login)

    def test_authenticate_rotates_refresh_token(self):
        first = AuthService.register(CPF, "secret1")
        second = AuthService.authenticate(CPF, "secret1")

        self.assertNotEqual(first["refresh_token"], second["refresh_token"])
        self.assertEqual(User.objects.get(cpf=CPF).refresh_token, second["refresh_token"])

    def test_authenticate_wrong_password_or_unknown_user(self):
        AuthService.register(CPF, "secret1")

        with self.assertRaises(InvalidCredentials):
            AuthService.authenticate(CPF, "wrong-pass")
        with self.assertRaises(InvalidCredentials):
            AuthService.authenticate(OTHER_CPF, "secret1")

    def test_authenticate_inactive_user(self):
        User.objects.create_user(cpf=CPF, password="secret1", is_active=False)
        with self.assertRaises(InvalidCredentials):
            AuthService.authenticate(CPF, "secret1")

    def test_refresh_token_rotates(self):
        tokens = AuthService.register(CPF, "secret1")

        refreshed = AuthService.refresh_token(tokens["access_token"], tokens["refresh_token"])

        self.assertNotEqual(refreshed["refresh_token"], tokens["refresh_token"])
        with self.assertRaises(InvalidRefreshToken):
            AuthService.refresh_token(refreshed["access_token"], tokens["refresh_token"])

    def test_refresh_token_expired(self):
        tokens = AuthService.register(CPF, "secret1")
        User.objects.filter(cpf=CPF).update(refresh_token_expires_at=timezone.now() - timedelta(seconds=1))

        with self.assertRaises(InvalidRefreshToken):
            AuthService.refresh_token(tokens["access_token"], tokens["refresh_token"])

    def test_refresh_token_with_invalid_access_token(self):
        tokens = AuthService.register(CPF, "secret1")
        with self.assertRaises(InvalidRefreshToken):
            AuthService.refresh_token("not-a-jwt", tokens["refresh_token"])

    def test_reset_password_revokes_refresh_token(self):
        tokens = AuthService.register(CPF, "secret1")

        self.assertTrue(AuthService.reset_password(CPF, "newsecret"))

        AuthService.authenticate(CPF, "newsecret")
        with self.assertRaises(InvalidCredentials):
            AuthService.authenticate(CPF, "secret1")
        with self.assertRaises(InvalidRefreshToken):
            AuthService.refresh_token(tokens["access_token"], tokens["refresh_token"])

    def test_reset_password_unknown_user(self):
        with self.assertRaises(UserNotFound):
            AuthService.reset_password(OTHER_CPF, "newsecret")

    def test_validate_token(self):
        tokens = AuthService.register(CPF, "secret1")

        self.assertEqual(AuthService.validate_token(tokens["access_token"]), str(tokens["user"].pk))
        self.assertIsNone(AuthService.validate_token("garbage"))
        self.assertIsNone(AuthService.validate_token(""))
        self.assertIsNone(AuthService.validate_token(tokens["access_token"] + "x"))


class AuthAPITests(APITestCase):
    def setUp(self):
        self.client = APIClient()

    def _register(self, cpf=CPF, password="secret1"):
        return self.client.post(reverse("auth-register"), {"cpf": cpf, "password": password}, format="json")

    def test_register(self):
        resp = self._register(cpf="529.982.247-25")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertIn("access_token", resp.data)
        self.assertIn("refresh_token", resp.data)
        self.assertIn("expiration", resp.data)
        self.assertEqual(resp.data["user"]["cpf"], CPF)
        self.assertNotIn("password", resp.data["user"])

    def test_register_invalid_cpf(self):
        resp = self._register(cpf="12345678900")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("cpf", resp.data)

    def test_register_short_password(self):
        resp = self._register(password="123")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", resp.data)

    def test_register_duplicate(self):
        self._register()
        resp = self._register()

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "duplicate_identifier")

    def test_login(self):
        self._register()

        resp = self.client.post(reverse("auth-login"), {"cpf": CPF, "password": "secret1"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        resp = self.client.post(reverse("auth-login"), {"cpf": CPF, "password": "nope-nope"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.data["code"], "invalid_credentials")

    def test_refresh_token(self):
        tokens = self._register().data

        resp = self.client.post(
            reverse("auth-refresh-token"),
            {"access_token": tokens["access_token"], "refresh_token": tokens["refresh_token"]},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertNotEqual(resp.data["refresh_token"], tokens["refresh_token"])

        resp = self.client.post(
            reverse("auth-refresh-token"),
            {"access_token": tokens["access_token"], "refresh_token": tokens["refresh_token"]},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_bearer_token_grants_access(self):
        tokens = self._register().data

        resp = self.client.get(reverse("auth-me"))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access_token']}")
        resp = self.client.get(reverse("auth-me"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["cpf"], CPF)

        resp = self.client.post(reverse("order-start"))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)

    def test_tampered_bearer_token_rejected(self):
        tokens = self._register().data

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access_token']}x")
        resp = self.client.get(reverse("auth-me"))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_reset_password_own_account(self):
        tokens = self._register().data
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access_token']}")

        resp = self.client.post(
            reverse("auth-reset-password"),
            {"cpf": "529.982.247-25", "new_password": "brandnew"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["message"], "Password reset successfully")
        self.assertTrue(User.objects.get(cpf=CPF).check_password("brandnew"))

    def test_reset_password_other_account_forbidden(self):
        User.objects.create_user(cpf=OTHER_CPF, password="secret1")
        tokens = self._register().data
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access_token']}")

        resp = self.client.post(
            reverse("auth-reset-password"),
            {"cpf": OTHER_CPF, "new_password": "brandnew"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(User.objects.get(cpf=OTHER_CPF).check_password("secret1"))

    def test_reset_password_requires_authentication(self):
        resp = self.client.post(
            reverse("auth-reset-password"),
            {"cpf": CPF, "new_password": "brandnew"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
