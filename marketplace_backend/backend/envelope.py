# backend/envelope.py

"""
API RESPONSE ENVELOPE (VERSIONED)

Every JSON response leaves the API in exactly one of two shapes:

    {"version": 1, "success": true,  "data": ...}
    {"version": 1, "success": false, "code": "...", "message": "...", "errors": {...}?}

Clients branch on `success` only; no shape sniffing.

The DRF exception handler below renders:
- marketplace domain errors (backend.exceptions)
- DRF errors (validation, auth, permission, throttling, 404)
- transient database contention (lock timeouts), as a retryable 503
- anything unexpected, logged, as a generic 500
"""

from __future__ import annotations

import logging

from django.db import OperationalError
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import set_rollback

from backend.exceptions import MarketplaceError

logger = logging.getLogger(__name__)

ENVELOPE_VERSION = 1


def success_response(data, *, http_status: int = status.HTTP_200_OK) -> Response:
    return Response(
        {"version": ENVELOPE_VERSION, "success": True, "data": data},
        status=http_status,
    )


def error_response(*, code: str, message: str, http_status: int, errors=None) -> Response:
    payload = {
        "version": ENVELOPE_VERSION,
        "success": False,
        "code": code,
        "message": message,
    }
    if errors:
        payload["errors"] = errors
    return Response(payload, status=http_status)


def _first_message(detail) -> str:
    """
    Flatten DRF's nested error detail into a single readable sentence.
    """
    if isinstance(detail, dict):
        for field, value in detail.items():
            inner = _first_message(value)
            if field in ("non_field_errors", "detail"):
                return inner
            return f"{field}: {inner}"
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def envelope_exception_handler(exc, context):
    set_rollback()

    if isinstance(exc, MarketplaceError):
        errors = None
        fields = getattr(exc, "fields", None)
        if fields:
            errors = {"missing_fields": fields}
        return error_response(
            code=exc.code,
            message=exc.message,
            http_status=exc.http_status,
            errors=errors,
        )

    if isinstance(exc, OperationalError):
        view = context.get("view")
        logger.warning(
            "Database busy, asking client to retry",
            extra={"view": view.__class__.__name__ if view else None, "error": str(exc)},
        )
        response = error_response(
            code="service_busy",
            message="The store is busy right now. Please try again in a moment.",
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
        response["Retry-After"] = "1"
        return response

    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound()

    if isinstance(exc, drf_exceptions.ValidationError):
        return error_response(
            code="validation_error",
            message=_first_message(exc.detail) or "Invalid input.",
            http_status=exc.status_code,
            errors=exc.detail,
        )

    if isinstance(exc, drf_exceptions.APIException):
        headers = {}
        if getattr(exc, "auth_header", None):
            headers["WWW-Authenticate"] = exc.auth_header
        if getattr(exc, "wait", None):
            headers["Retry-After"] = str(int(exc.wait))

        response = error_response(
            code=exc.default_code if isinstance(exc.detail, (dict, list)) else exc.detail.code,
            message=_first_message(exc.detail),
            http_status=exc.status_code,
        )
        for key, value in headers.items():
            response[key] = value
        return response

    view = context.get("view")
    logger.exception(
        "Unhandled API error",
        extra={"view": view.__class__.__name__ if view else None},
    )
    return error_response(
        code="server_error",
        message="An unexpected error occurred. Please try again later.",
        http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
