"""API error types and the project exception handler.

Validation, permission and not-found failures use DRF's own exceptions
(ValidationError, PermissionDenied, NotFound). Storage failures are logged
with their traceback and answered with a generic 500 that leaks no internals.
"""

import logging
from typing import Any

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class InternalError(APIException):
    """Storage or unexpected failure; never retried."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error."
    default_code = "internal_error"


def exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """DRF exception handler adding an error code and a generic answer for DB errors."""
    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception("Storage failure in %s", type(view).__name__ if view else "unknown view")
        exc = InternalError()
    response = drf_exception_handler(exc, context)
    if response is not None and isinstance(exc, APIException) and isinstance(response.data, dict):
        codes = exc.get_codes()
        if isinstance(codes, str):
            response.data.setdefault("code", codes)
    return response
