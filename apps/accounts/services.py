import logging
import secrets
from datetime import datetime, timezone as dt_timezone

from django.db import transaction
from django.utils import timezone
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from apps.utils.validators import normalize_cpf
from .exceptions import (
    DuplicateIdentifier,
    InvalidCredentials,
    InvalidRefreshToken,
    UserNotFound,
)
from .models import User

logger = logging.getLogger(__name__)


class AuthService:
    """
    Registration, login, token rotation and password reset.

    Access tokens are SimpleJWT AccessTokens (HS256, issuer/audience from SIMPLE_JWT).
    Refresh tokens are opaque random strings stored on the user row; each successful
    register/login/refresh replaces the stored one.
    """

    REFRESH_TOKEN_BYTES = 32

    @staticmethod
    def _issue_tokens(user: User) -> dict:
        access = AccessToken.for_user(user)
        access["cpf"] = user.cpf

        refresh_token = secrets.token_urlsafe(AuthService.REFRESH_TOKEN_BYTES)
        user.refresh_token = refresh_token
        user.refresh_token_expires_at = timezone.now() + api_settings.REFRESH_TOKEN_LIFETIME
        user.save(update_fields=["refresh_token", "refresh_token_expires_at"])

        return {
            "access_token": str(access),
            "expiration": datetime.fromtimestamp(access["exp"], tz=dt_timezone.utc),
            "refresh_token": refresh_token,
            "user": user,
        }

    @staticmethod
    @transaction.atomic
    def register(cpf: str, password: str) -> dict:
        cpf = normalize_cpf(cpf)
        if User.objects.filter(cpf=cpf).exists():
            raise DuplicateIdentifier()

        user = User.objects.create_user(cpf=cpf, password=password)
        logger.info("User registered", extra={"user_id": user.pk})
        return AuthService._issue_tokens(user)

    @staticmethod
    @transaction.atomic
    def authenticate(cpf: str, password: str) -> dict:
        user = User.objects.get_by_cpf(cpf)

        # Same answer for unknown user and wrong password
        if user is None or not user.is_active or not user.check_password(password):
            logger.warning("Login rejected")
            raise InvalidCredentials()

        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])
        return AuthService._issue_tokens(user)

    @staticmethod
    @transaction.atomic
    def refresh_token(access_token: str, refresh_token: str) -> dict:
        user_id = AuthService.validate_token(access_token)
        if user_id is None:
            raise InvalidRefreshToken("Invalid access token.")

        user = User.objects.select_for_update().filter(pk=user_id, is_active=True).first()
        if user is None or not user.has_valid_refresh_token(refresh_token):
            logger.warning("Refresh rejected", extra={"user_id": user_id})
            raise InvalidRefreshToken()

        return AuthService._issue_tokens(user)

    @staticmethod
    @transaction.atomic
    def reset_password(cpf: str, new_password: str) -> bool:
        user = User.objects.select_for_update().filter(cpf=normalize_cpf(cpf)).first()
        if user is None:
            raise UserNotFound()

        user.set_password(new_password)
        # Old sessions must log in again
        user.refresh_token = None
        user.refresh_token_expires_at = None
        user.save(update_fields=["password", "refresh_token", "refresh_token_expires_at"])

        logger.info("Password reset", extra={"user_id": user.pk})
        return True

    @staticmethod
    def validate_token(token: str):
        """
        Returns the user id carried by a valid access token, None otherwise.
        """
        if not token:
            return None
        try:
            access = AccessToken(token)
        except TokenError:
            return None
        return access.get(api_settings.USER_ID_CLAIM)
