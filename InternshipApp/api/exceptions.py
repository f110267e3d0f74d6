"""DRF exception handler aligning request-shape errors with the domain taxonomy.

Serializer failures are reported like ``core.exceptions.ValidationError``:
HTTP 422 with ``detail`` and the dotted ``field`` path of the first error, plus
the full DRF error tree under ``errors``.
"""

from typing import Any

from rest_framework import exceptions as drf_exceptions
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler as drf_exception_handler

from InternshipApp.core.exceptions import ValidationError


def first_error(detail: Any, path: tuple[str, ...] = ()) -> tuple[str, str]:
    """Return ``(field_path, message)`` for the first leaf of a DRF error tree."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            return first_error(value, (*path, str(key)))
    if isinstance(detail, list):
        for index, item in enumerate(detail):
            if not item:
                continue
            if isinstance(item, (dict, list)):
                return first_error(item, (*path, str(index)))
            return first_error(item, path)
    return ".".join(path) or api_settings.NON_FIELD_ERRORS_KEY, str(detail)


def exception_handler(exc: Exception, context: dict) -> Any:
    errors = None
    if isinstance(exc, drf_exceptions.ValidationError):
        errors = exc.detail
        field, message = first_error(errors)
        exc = ValidationError(field, message)
    response = drf_exception_handler(exc, context)
    if response is not None and errors is not None:
        response.data["errors"] = errors
    return response
