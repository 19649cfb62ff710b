# services/portal-service/src/apps/api/views/pilot_views.py
"""
Pilot Functions
"""

import logging

from shared.common.exceptions import AuthorizationError
from shared.common.permissions import IsAuthenticated, IsPortalAdmin

from apps.core.services import PilotService
from ..serializers import PilotSerializer, PilotWriteSerializer
from .base import FunctionView

logger = logging.getLogger(__name__)

ADMIN_ONLY_PILOT_FIELDS = ('is_admin', 'is_hidden', 'user_id')


class GetAllPilotsView(FunctionView):
    """All pilots, hidden ones included, ordered by name."""

    function_name = 'get_all_pilots'

    def invoke(self, request, body):
        pilots = PilotService.list_pilots(include_hidden=body.get('include_hidden', True))
        return PilotSerializer(pilots, many=True).data


class GetPilotByIdView(FunctionView):
    function_name = 'get_pilot_by_id'

    def invoke(self, request, body):
        self.require(body, 'p_pilot_id', message='Pilot ID is required')
        pilot = PilotService.get_pilot(self.parse_id(body['p_pilot_id'], 'p_pilot_id'))
        return PilotSerializer(pilot).data


class CreatePilotView(FunctionView):
    function_name = 'create_pilot'
    permission_classes = [IsPortalAdmin]

    def invoke(self, request, body):
        pilot_data = self.require_mapping(body, 'p_pilot_data', 'Pilot data is required')
        pilot = PilotService.create_pilot(self.validated(PilotWriteSerializer, pilot_data))
        return PilotSerializer(pilot).data


class UpdatePilotView(FunctionView):
    """
    Admins may edit any pilot. A signed-in pilot may edit its own name and
    email but not its flags or auth link.
    """

    function_name = 'update_pilot'
    permission_classes = [IsAuthenticated]

    def invoke(self, request, body):
        self.require(body, 'p_pilot_id', message='Pilot ID is required')
        pilot_data = self.require_mapping(body, 'p_pilot_data', 'Pilot data is required')
        pilot_id = self.parse_id(body['p_pilot_id'], 'p_pilot_id')

        changes = self.validated(PilotWriteSerializer, pilot_data, partial=True)

        if not self.is_admin_request(request):
            pilot = PilotService.get_pilot(pilot_id)
            user_id = getattr(request.user, 'user_id', None)
            if not user_id or pilot.user_id != user_id:
                raise AuthorizationError('You can only edit your own profile')
            if any(field in changes for field in ADMIN_ONLY_PILOT_FIELDS):
                raise AuthorizationError('Only administrators can change pilot access')

        pilot = PilotService.update_pilot(pilot_id, changes)
        return PilotSerializer(pilot).data
