# shared/common/middleware.py
"""
Request Middleware

Request ids and one log line per portal function invocation.
"""

import uuid
import time
import logging
from typing import Callable, Optional
from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

FUNCTIONS_PREFIX = '/functions/v1/'


class RequestIDMiddleware:
    """
    Echoes the caller's X-Request-ID, or mints one, on every response.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        request.request_id = request_id

        response = self.get_response(request)
        response['X-Request-ID'] = request_id
        return response


def function_name(path: str) -> Optional[str]:
    """``get_all_flights`` for ``/functions/v1/get_all_flights/``; None elsewhere."""
    if not path.startswith(FUNCTIONS_PREFIX):
        return None
    name = path[len(FUNCTIONS_PREFIX):].strip('/')
    return name or None


class FunctionLoggingMiddleware:
    """
    Logs each function invocation with its outcome and duration.
    Pre-flight requests and paths outside the functions prefix pass through.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        name = function_name(request.path)
        if name is None or request.method == 'OPTIONS':
            return self.get_response(request)

        start_time = time.monotonic()
        response = self.get_response(request)
        duration_ms = round((time.monotonic() - start_time) * 1000, 2)

        log_method = logger.warning if response.status_code >= 400 else logger.info
        log_method(
            f"Function {name} answered {response.status_code} in {duration_ms}ms",
            extra={
                'request_id': getattr(request, 'request_id', None),
                'function': name,
                'status_code': response.status_code,
                'duration_ms': duration_ms,
                'client_info': request.headers.get('X-Client-Info'),
                'ip_address': client_ip(request),
            }
        )
        response['X-Response-Time'] = f"{duration_ms:.2f}ms"
        return response


def client_ip(request: HttpRequest) -> str:
    forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')
