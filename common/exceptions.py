"""Domain error taxonomy and the DRF exception handler.

Services raise the exceptions below without knowing about HTTP; the API layer
maps them to status codes and a single JSON error envelope::

    {"success": false, "error": {"message": "...", ...}}
"""

import logging

from django.conf import settings
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger("storefront.api")


class DomainError(Exception):
    """Base class for business-rule failures raised by services."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def payload(self) -> dict:
        return {"message": self.message}


class InsufficientStock(DomainError):
    """Raised when one or more lines ask for more than is in stock.

    ``lines`` holds every violating line, not only the first one found.
    """

    default_message = "Insufficient stock."

    def __init__(self, lines: list[dict], message: str | None = None):
        self.lines = list(lines)
        if message is None:
            skus = ", ".join(str(line.get("sku") or line.get("variant_id")) for line in self.lines)
            message = f"Insufficient stock for: {skus}" if skus else None
        super().__init__(message)

    def payload(self) -> dict:
        return {"message": self.message, "lines": self.lines}


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action."


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists."


class InvalidTransition(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Status transition is not allowed."

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move order from '{current}' to '{target}'.")


def _error_response(payload: dict, code: int, headers=None) -> Response:
    return Response({"success": False, "error": payload}, status=code, headers=headers)


def _flatten_detail(detail) -> str:
    if isinstance(detail, dict):
        for key, value in detail.items():
            text = _flatten_detail(value)
            return text if key == "non_field_errors" else f"{key}: {text}"
        return ""
    if isinstance(detail, (list, tuple)):
        return _flatten_detail(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc, context):
    """DRF ``EXCEPTION_HANDLER`` producing the shared error envelope."""

    if isinstance(exc, DomainError):
        return _error_response(exc.payload(), exc.status_code)

    if isinstance(exc, drf_exceptions.ValidationError):
        payload = {"message": _flatten_detail(exc.detail) or "Invalid input."}
        if isinstance(exc.detail, dict):
            payload["fields"] = exc.detail
        return _error_response(payload, exc.status_code)

    response = drf_exception_handler(exc, context)
    if response is not None:
        detail = getattr(exc, "detail", None)
        if isinstance(exc, Http404) or detail is None:
            message = "Not found." if isinstance(exc, Http404) else str(exc)
        else:
            message = _flatten_detail(detail)
        headers = {k: v for k, v in response.items() if k in ("Retry-After", "WWW-Authenticate", "Allow")}
        return _error_response({"message": message}, response.status_code, headers=headers)

    view = context.get("view")
    logger.exception(
        "api.unhandled_error",
        extra={"event": "api.unhandled_error", "view": view.__class__.__name__ if view else None},
    )
    if getattr(settings, "DEBUG", False):
        return None
    return _error_response({"message": "Internal server error"}, status.HTTP_500_INTERNAL_SERVER_ERROR)
