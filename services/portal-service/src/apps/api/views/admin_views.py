# services/portal-service/src/apps/api/views/admin_views.py
"""
Admin Functions

Role check, admin access repair and deployment self-check.
"""

import logging

from shared.common.permissions import IsAuthenticated, IsPortalAdmin

from apps.core.services import PilotService
from ..serializers import PilotSerializer
from .base import FunctionView

logger = logging.getLogger(__name__)


class IsAdminView(FunctionView):
    """
    Privileged role check for the bearer of the access token.

    The answer comes from the pilot store, never from the caller.
    """

    function_name = 'is_admin'
    permission_classes = [IsAuthenticated]

    def invoke(self, request, body):
        is_admin = self.is_admin_request(request)
        logger.debug(f"Role check for {request.user}: admin={is_admin}")
        return {'isAdmin': is_admin}


class FixAdminAccessView(FunctionView):
    function_name = 'fix_admin_access'
    permission_classes = [IsPortalAdmin]

    def invoke(self, request, body):
        self.require(body, 'email', 'user_id', message='Email and user_id are required')
        pilot, created = PilotService.fix_admin_access(
            email=body['email'],
            user_id=str(body['user_id']),
            name=body.get('name'),
        )
        return {
            'message': 'Admin access granted' if created else 'Admin access confirmed',
            'pilot': PilotSerializer(pilot).data,
        }


class CheckFunctionsExistView(FunctionView):
    """Report which portal functions this deployment serves."""

    function_name = 'check_functions_exist'
    permission_classes = [IsPortalAdmin]

    def invoke(self, request, body):
        # Imported here; the registry imports this module
        from ..functions import FUNCTION_REGISTRY, EXPECTED_FUNCTIONS

        existing = [name for name in EXPECTED_FUNCTIONS if name in FUNCTION_REGISTRY]
        missing = [name for name in EXPECTED_FUNCTIONS if name not in FUNCTION_REGISTRY]
        return {
            'existingFunctions': existing,
            'missingFunctions': missing,
            'allFunctionsExist': not missing,
        }
