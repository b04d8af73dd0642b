"""Project exception handler for the REST API.

Every error body has the shape `{"detail": ..., "code": ...}`; the
frontend shows `detail` verbatim.
"""
from __future__ import annotations

import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .exceptions import Forbidden, NotFound

logger = logging.getLogger(__name__)


def _flatten_detail(detail) -> str:
    # Collapse serializer error trees into one readable message
    if isinstance(detail, dict):
        parts = []
        for field, value in detail.items():
            msg = _flatten_detail(value)
            parts.append(msg if field in ("non_field_errors", "detail") else f"{field}: {msg}")
        return " ".join(parts)
    if isinstance(detail, (list, tuple)):
        return " ".join(_flatten_detail(item) for item in detail)
    return str(detail)


def _first_code(codes) -> str:
    if isinstance(codes, dict):
        codes = next(iter(codes.values()), "error")
    if isinstance(codes, (list, tuple)):
        return _first_code(codes[0]) if codes else "error"
    return str(codes)


def exception_handler(exc, context):
    if isinstance(exc, Http404):
        exc = NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = Forbidden()
    response = drf_exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "API view")
        return Response(
            {"detail": "Internal server error.", "code": "server_error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    if isinstance(exc, exceptions.APIException):
        body = {"detail": _flatten_detail(exc.detail), "code": _first_code(exc.get_codes())}
        if isinstance(exc, exceptions.ValidationError) and isinstance(exc.detail, dict):
            body["errors"] = exc.detail
        response.data = body
    return response
