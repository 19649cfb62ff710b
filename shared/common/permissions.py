# shared/common/permissions.py
"""
Permission Classes for Portal Functions
"""

import logging
from django.conf import settings
from django.utils.module_loading import import_string
from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView

from .exceptions import AuthenticationRequiredError, AuthorizationError

logger = logging.getLogger(__name__)


class BasePermission(permissions.BasePermission):
    """Base permission class with utility methods"""

    def is_authenticated(self, request: Request) -> bool:
        return bool(
            request.user and
            hasattr(request.user, 'is_authenticated') and
            request.user.is_authenticated
        )

    def is_service_request(self, request: Request) -> bool:
        return bool(getattr(request.user, 'is_service', False))


class IsAuthenticated(BasePermission):
    """Verify that the caller presented a valid bearer token or the service key"""

    def has_permission(self, request: Request, view: APIView) -> bool:
        if not self.is_authenticated(request):
            raise AuthenticationRequiredError()
        return True


class IsPortalAdmin(BasePermission):
    """
    Allow the service key, or a bearer token whose pilot row is flagged admin.

    The admin flag is always read from the store; nothing the client sends
    about its own role is trusted.
    """

    def has_permission(self, request: Request, view: APIView) -> bool:
        if not self.is_authenticated(request):
            raise AuthenticationRequiredError()

        if self.is_service_request(request):
            return True

        lookup = import_string(settings.PORTAL_ADMIN_LOOKUP)
        user = request.user
        if lookup(user_id=getattr(user, 'user_id', None), email=getattr(user, 'email', None)):
            return True

        logger.warning(
            f"Admin privileges denied for {user}",
            extra={'user_id': getattr(user, 'user_id', None), 'path': request.path}
        )
        raise AuthorizationError()
