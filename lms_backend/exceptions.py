import logging

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

ValidationError = exceptions.ValidationError
AuthenticationError = exceptions.NotAuthenticated


class AuthorizationError(exceptions.PermissionDenied):
    default_detail = "You do not have permission to perform this action."
    default_code = "forbidden"


class NotFoundError(exceptions.NotFound):
    default_detail = "Not found."
    default_code = "not_found"


class ConflictError(exceptions.APIException):
    """Duplicate name, duplicate enrollment and similar clashes."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Resource already exists."
    default_code = "conflict"

    def __init__(self, detail=None, code=None, extra=None):
        super().__init__(detail, code)
        self.extra = extra or {}


class InvalidSignature(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid payment signature"
    default_code = "invalid_signature"


class ExternalServiceError(exceptions.APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "An external service is unavailable. Please try again later."
    default_code = "external_service_error"


def _message_from_detail(detail):
    if isinstance(detail, (list, tuple)) and detail:
        return _message_from_detail(detail[0])
    if isinstance(detail, dict) and detail:
        key, value = next(iter(detail.items()))
        inner = _message_from_detail(value)
        return inner if key in ("detail", "non_field_errors") else f"{key}: {inner}"
    return str(detail)


def api_exception_handler(exc, context):
    """
    Render every error in the {"success": False, "message": ...} envelope.

    Django-level validation errors and missing objects are translated to their
    DRF counterparts first; anything DRF does not recognise is logged with its
    stack trace and reported as a generic 500.
    """
    if isinstance(exc, DjangoValidationError):
        exc = exceptions.ValidationError(
            exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        )
    elif isinstance(exc, (Http404, ObjectDoesNotExist)) and not isinstance(exc, exceptions.APIException):
        exc = NotFoundError()

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "view", exc_info=exc)
        return Response(
            {"success": False, "message": "An unexpected error occurred."},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    payload = {"success": False, "message": _message_from_detail(response.data)}
    if isinstance(exc, exceptions.ValidationError) and isinstance(response.data, dict):
        payload["errors"] = response.data
    payload.update(getattr(exc, "extra", {}))
    response.data = payload
    return response
