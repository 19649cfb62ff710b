# shared/common/exceptions.py
"""
Portal Exception Classes and Exception Handler

Every failure in the portal maps to one of five kinds:
remote call, missing field, authorization, identity timeout, malformed
payload. Server handlers turn them into the portal response envelope,
the client gateway turns them into failed results.
"""

import logging
import traceback
from typing import Dict, Any, Optional
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.response import Response
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from django.conf import settings

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION
# =============================================================================

class PortalError(Exception):
    """Base exception for all portal errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'An unexpected error occurred.'
    code = 'PORTAL_ERROR'

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message or self.default_message
        self.code = code or self.code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            'error': self.code,
            'message': self.message,
            'details': self.details,
        }


# =============================================================================
# ERROR TAXONOMY
# =============================================================================

class RemoteCallError(PortalError):
    """Network or remote procedure failure."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = 'The remote call failed.'
    code = 'REMOTE_CALL_FAILED'


class MissingFieldError(PortalError):
    """A required field was missing or invalid."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Missing required fields.'
    code = 'MISSING_FIELD'

    def __init__(self, message: str = None, fields: list = None, details: Optional[Dict] = None):
        error_details = details or {}
        if fields:
            error_details['fields'] = list(fields)
        super().__init__(message=message, details=error_details)


class AuthenticationRequiredError(PortalError):
    """The caller is not logged in."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Not authenticated'
    code = 'NOT_AUTHENTICATED'


class AuthorizationError(PortalError):
    """The caller is logged in but lacks the required privilege."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'You do not have administrator privileges.'
    code = 'NOT_AUTHORIZED'


class NotFoundError(PortalError):
    """The requested row does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'The requested resource was not found.'
    code = 'NOT_FOUND'

    def __init__(self, resource: str = 'Resource', resource_id: Any = None, message: str = None):
        super().__init__(
            message=message or f"{resource} not found",
            details={'resource': resource, 'id': str(resource_id) if resource_id else None}
        )


class IdentityTimeoutError(PortalError):
    """Identity resolution exceeded its time bound."""
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = 'Authentication is taking longer than expected.'
    code = 'IDENTITY_TIMEOUT'


class MalformedPayloadError(PortalError):
    """A semi-structured value could not be parsed."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = 'Malformed payload.'
    code = 'MALFORMED_PAYLOAD'


class ConfigurationError(PortalError):
    """Required runtime configuration is missing."""
    default_message = 'Service credentials are not configured'
    code = 'CONFIGURATION_ERROR'


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

def error_response(message: str, status_code: int) -> Response:
    """Build the portal failure envelope; the request id travels in X-Request-ID."""
    return Response({'success': False, 'error': message}, status=status_code)


def portal_exception_handler(exc, context) -> Optional[Response]:
    """
    Exception handler for DRF.
    Every portal function answers failures with
    {"success": false, "error": "<message>"}.
    """
    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    if isinstance(exc, PortalError):
        log_method = logger.error if exc.status_code >= 500 else logger.warning
        log_method(
            f"Portal error: {exc.message}",
            extra={'request_id': request_id, 'code': exc.code, 'details': exc.details}
        )
        return error_response(exc.message, exc.status_code)

    # Let DRF translate its own exceptions, then re-shape the body
    response = exception_handler(exc, context)
    if response is not None:
        return error_response(get_error_message(exc, response), response.status_code)

    if isinstance(exc, DjangoValidationError):
        message = '; '.join(exc.messages) if hasattr(exc, 'messages') else str(exc)
        return error_response(message, status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, Http404):
        return error_response(str(exc) or 'Resource not found', status.HTTP_404_NOT_FOUND)

    logger.exception(
        f"Unhandled exception: {exc}",
        extra={
            'request_id': request_id,
            'exception_type': type(exc).__name__,
            'traceback': traceback.format_exc(),
        }
    )

    if settings.DEBUG:
        return error_response(f"{type(exc).__name__}: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return error_response(str(exc) or 'An unknown error occurred', status.HTTP_500_INTERNAL_SERVER_ERROR)


def get_error_message(exc, response: Response) -> str:
    """Extract a human readable message from a DRF exception."""

    detail = getattr(exc, 'detail', None)
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail:
        return str(detail[0])
    if isinstance(detail, dict):
        if 'detail' in detail:
            return str(detail['detail'])
        parts = []
        for field, errors in detail.items():
            first = errors[0] if isinstance(errors, list) and errors else errors
            parts.append(f"{field}: {first}")
        return '; '.join(parts)

    if isinstance(response.data, dict):
        return str(response.data.get('detail', response.data))

    return str(response.data)
