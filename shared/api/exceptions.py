"""API error taxonomy and the project-wide DRF exception handler.

Every error leaves the API as ``{"status": ..., "message": ...}``; field
level details, when there are any, go under ``errors``. ``status`` is
``"fail"`` for client errors and ``"error"`` for server errors.
"""

from __future__ import annotations

import logging
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.db import OperationalError  # type: ignore
from django.db.models import ProtectedError  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.exceptions import APIException, ValidationError  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 5


class ConflictError(APIException):
    """The request collides with existing state (e.g. an overlapping booking)."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with the current state of the resource."
    default_code = "conflict"


class GatewayError(APIException):
    """A payment gateway notification failed verification."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Payment gateway notification could not be verified."
    default_code = "gateway_error"


class GatewayUnavailableError(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment gateway is unavailable. Try again later."
    default_code = "gateway_unavailable"


class StoreUnavailableError(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Storage is temporarily unavailable. Try again later."
    default_code = "store_unavailable"


def _first_message(data: Any) -> str:
    if isinstance(data, dict):
        if "detail" in data:
            return _first_message(data["detail"])
        for key, value in data.items():
            message = _first_message(value)
            if key == "non_field_errors":
                return message
            return f"{key}: {message}"
        return ""
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else ""
    return str(data)


def _translate(exc: Exception) -> Exception:
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "error_dict"):
            return ValidationError(exc.message_dict)
        return ValidationError(exc.messages)
    if isinstance(exc, ProtectedError):
        return ConflictError("Resource is still referenced by other records.")
    if isinstance(exc, OperationalError):
        logger.warning("Store operation failed: %s", exc)
        return StoreUnavailableError()
    return exc


def api_exception_handler(exc: Exception, context: dict) -> Response:
    exc = _translate(exc)
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled API error in %s",
            view.__class__.__name__ if view else "unknown view",
            exc_info=exc,
        )
        return Response(
            {"status": "error", "message": "Something went wrong. Please try again later."},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    body: dict[str, Any] = {
        "status": "fail" if response.status_code < 500 else "error",
        "message": _first_message(response.data),
    }
    if isinstance(exc, ValidationError) and isinstance(response.data, dict):
        body["errors"] = response.data
    if isinstance(exc, StoreUnavailableError):
        response["Retry-After"] = str(RETRY_AFTER_SECONDS)
    response.data = body
    return response
