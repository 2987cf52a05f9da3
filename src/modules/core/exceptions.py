"""Domain error kinds and the DRF exception handler.

Every module raises subclasses of the three kinds below from its service
layer.  Views catch them and answer ``{"message": ...}`` with the matching
status; ``api_exception_handler`` gives framework errors the same shape
and turns anything uncaught into a logged 500.
"""

from __future__ import annotations

from typing import Any

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Base class for business-rule violations."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(DomainError):
    """A referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class DomainValidationError(DomainError):
    """The request is well-formed but violates a business rule."""


class InvalidState(DomainValidationError):
    """The aggregate is not in a state that allows the operation."""


def error_response(exc: DomainError) -> Response:
    """Translate a domain error into the API error body."""
    return Response({"message": str(exc)}, status=exc.status_code)


def _first_message(detail: Any) -> str:
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return ""
    if isinstance(detail, list):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc: Exception, context: dict) -> Response:
    """DRF ``EXCEPTION_HANDLER`` producing ``{"message": ..., "errors": ...}``."""
    if isinstance(exc, DomainError):
        return error_response(exc)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception(
            "api.unhandled_exception",
            view=view.__class__.__name__ if view else None,
            error=str(exc),
        )
        return Response(
            {"message": "Server error.", "error": str(exc)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    detail = response.data
    body: dict[str, Any] = {"message": _first_message(detail)}
    if isinstance(detail, (dict, list)) and not (
        isinstance(detail, dict) and set(detail) == {"detail"}
    ):
        body["errors"] = detail
    response.data = body
    return response
