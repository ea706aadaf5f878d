"""Helpers shared by the JSON API views."""

import json
import logging
from collections.abc import Callable, Sequence
from functools import wraps
from typing import Any, Final

from django.db import DatabaseError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from server.apps.core.exceptions import ApiError, InternalError

logger = logging.getLogger(__name__)

TOKEN_HEADER: Final = 'X-Token'

_View = Callable[..., HttpResponse]


def error_response(error: ApiError) -> JsonResponse:
    """Build the JSON body for an API error.

    Args:
        error: Error to report.

    Returns:
        ``{"error": message}`` response with the error's status code.
    """
    return JsonResponse({'error': error.message}, status=error.status_code)


def api_view(methods: Sequence[str]) -> Callable[[_View], _View]:
    """Turn a function into a JSON API endpoint.

    The wrapped view is CSRF exempt, restricted to ``methods`` and has
    its errors translated: ``ApiError`` becomes its own status, storage
    failures become a logged 500.

    Args:
        methods: Allowed HTTP methods.

    Returns:
        View decorator.
    """
    def decorator(view: _View) -> _View:
        @wraps(view)
        def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
            try:
                return view(request, *args, **kwargs)
            except InternalError as exc:
                logger.exception('%s %s failed', request.method, request.path)
                return error_response(exc)
            except ApiError as exc:
                return error_response(exc)
            except DatabaseError:
                logger.exception('Database error on %s %s', request.method, request.path)
                return error_response(InternalError())

        return csrf_exempt(require_http_methods(list(methods))(wrapper))

    return decorator


def read_json(request: HttpRequest) -> dict[str, Any]:
    """Parse the JSON request body.

    Bodies that are empty, malformed or not an object parse as ``{}``
    so the field validation reports what's missing.

    Args:
        request: Incoming request.

    Returns:
        Parsed JSON object.
    """
    try:
        payload = json.loads(request.body or b'{}')
    except (ValueError, UnicodeDecodeError):
        return {}
    if not isinstance(payload, dict):
        return {}
    return payload


def get_token(request: HttpRequest) -> str | None:
    """Get the session token sent in the ``X-Token`` header.

    Args:
        request: Incoming request.

    Returns:
        Token string, or None if the header is absent or empty.
    """
    return request.headers.get(TOKEN_HEADER) or None
