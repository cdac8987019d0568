from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import ValidationError
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger(__name__)

class BusinessLogicException(Exception):
    """
    Raised when a domain rule is violated (e.g. 'Order is closed').
    Subclasses pick the HTTP status the boundary answers with.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Business rule violated."
    default_code = "business_error"

    def __init__(self, message=None, code=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)


class NotFoundError(BusinessLogicException):
    """
    Order, product, item or user could not be resolved.
    """
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."
    default_code = "not_found"


class InvalidTransitionError(BusinessLogicException):
    """
    Operation is not legal in the current state of the aggregate.
    """
    default_message = "Operation not allowed in the current state."
    default_code = "invalid_transition"


def custom_exception_handler(exc, context):
    # Model-level validation (e.g. a malformed UUID reaching a filter) is a client error
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(exc.messages)

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    # Handle custom BusinessLogicException
    if isinstance(exc, BusinessLogicException):
        return Response(
            {"error": exc.message, "code": exc.code},
            status=exc.status_code
        )

    # If response is None, it's an unhandled server error (500)
    if response is None:
        logger.error(f"Unhandled Exception: {exc}", exc_info=True)
        return Response(
            {"error": "Internal Server Error", "code": "server_error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return response
