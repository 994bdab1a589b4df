"""
API error rendering.

Every error leaving the API uses the same ``{success, message, data}``
envelope as successful responses.  Validation errors keep the per-field
messages under ``data.errors``.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class MissingContextError(APIException):
    """Raised when a write is attempted without an organization context."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Organization is required.'
    default_code = 'missing_context'


def _first_message(errors) -> str:
    if isinstance(errors, dict):
        for value in errors.values():
            return _first_message(value)
        return ''
    if isinstance(errors, (list, tuple)):
        return _first_message(errors[0]) if errors else ''
    return str(errors)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception("Unhandled error in %s", getattr(view, '__name__', view.__class__.__name__))
        return Response(
            {'success': False, 'message': 'Internal server error', 'data': None},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        errors = resp.data if isinstance(resp.data, dict) else {'nonFieldErrors': resp.data}
        return Response(
            {'success': False, 'message': _first_message(errors) or 'Validation failed', 'data': {'errors': errors}},
            status=resp.status_code,
        )

    if isinstance(resp.data, dict) and 'detail' in resp.data:
        message = str(resp.data['detail'])
    else:
        message = _first_message(resp.data)
    code = getattr(exc, 'default_code', 'error')
    if hasattr(exc, 'get_codes'):
        codes = exc.get_codes()
        code = codes if isinstance(codes, str) else code
    return Response(
        {'success': False, 'message': message, 'data': {'code': code}},
        status=resp.status_code,
        headers={k: v for k, v in resp.items()},
    )
