# services/portal-service/src/apps/api/views/base.py
"""
Base Function View

Every portal function is a POST endpoint at /functions/v1/<name>/ that
answers with the envelope {"success": true, "data": ...} or
{"success": false, "error": "..."}.
"""

import logging
import uuid
from typing import Any, Dict

from django.conf import settings
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from shared.common.exceptions import (
    AuthenticationRequiredError,
    AuthorizationError,
    ConfigurationError,
    MissingFieldError,
    NotFoundError,
)
from shared.common.permissions import IsPortalAdmin

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
}


class FunctionView(APIView):
    """
    Base class for portal functions.

    Subclasses set ``function_name`` and implement ``invoke``, returning the
    ``data`` member of the success envelope.
    """

    function_name: str = None
    permission_classes = [AllowAny]
    http_method_names = ['post', 'options']

    def initial(self, request, *args, **kwargs):
        # Credentials are read per invocation
        if request.method != 'OPTIONS' and not settings.PORTAL_SERVICE_KEY:
            raise ConfigurationError()
        super().initial(request, *args, **kwargs)

    def check_permissions(self, request):
        # Pre-flight carries no credentials
        if request.method == 'OPTIONS':
            return
        super().check_permissions(request)

    def options(self, request, *args, **kwargs):
        """CORS pre-flight: empty 200."""
        return Response(status=status.HTTP_200_OK)

    def finalize_response(self, request, response, *args, **kwargs):
        response = super().finalize_response(request, response, *args, **kwargs)
        for header, value in CORS_HEADERS.items():
            response[header] = value
        return response

    def post(self, request, *args, **kwargs):
        body = self.get_body(request)
        logger.debug(f"Invoking function {self.function_name}")
        return self.success(self.invoke(request, body))

    def invoke(self, request, body: Dict[str, Any]) -> Any:
        raise NotImplementedError

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    def success(data: Any = None) -> Response:
        return Response({'success': True, 'data': data}, status=status.HTTP_200_OK)

    @staticmethod
    def get_body(request) -> Dict[str, Any]:
        data = request.data
        if data is None or data == '':
            return {}
        if not isinstance(data, dict):
            raise MissingFieldError('Request body must be a JSON object')
        return data

    @staticmethod
    def require(body: Dict[str, Any], *fields: str, message: str = None) -> None:
        missing = [field for field in fields if body.get(field) in (None, '')]
        if missing:
            raise MissingFieldError(
                message or f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required",
                fields=missing
            )

    @staticmethod
    def require_mapping(body: Dict[str, Any], field: str, message: str = None) -> Dict[str, Any]:
        value = body.get(field)
        if not isinstance(value, dict):
            raise MissingFieldError(message or f"{field} is required", fields=[field])
        return value

    @staticmethod
    def parse_id(value: Any, field: str) -> uuid.UUID:
        try:
            return uuid.UUID(str(value))
        except ValueError:
            raise MissingFieldError(f"{field} must be a valid id", fields=[field])

    @staticmethod
    def is_admin_request(request) -> bool:
        try:
            return IsPortalAdmin().has_permission(request, None)
        except (AuthenticationRequiredError, AuthorizationError):
            return False

    @staticmethod
    def validated(serializer_class, data, **kwargs) -> Dict[str, Any]:
        serializer = serializer_class(data=data, **kwargs)
        serializer.is_valid(raise_exception=True)
        return dict(serializer.validated_data)


class UnknownFunctionView(FunctionView):
    """Fallback for names with no registered function."""

    def initial(self, request, *args, **kwargs):
        APIView.initial(self, request, *args, **kwargs)

    def post(self, request, *args, **kwargs):
        raise NotFoundError(message=f"Function {kwargs.get('name')} not found")
