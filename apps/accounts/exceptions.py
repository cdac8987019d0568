from rest_framework import status

from apps.utils.exceptions import BusinessLogicException, NotFoundError


class UserNotFound(NotFoundError):
    default_message = "User not found."
    default_code = "user_not_found"


class DuplicateIdentifier(BusinessLogicException):
    default_message = "CPF already registered."
    default_code = "duplicate_identifier"


class InvalidCredentials(BusinessLogicException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials."
    default_code = "invalid_credentials"


class InvalidRefreshToken(BusinessLogicException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired refresh token."
    default_code = "invalid_refresh_token"
