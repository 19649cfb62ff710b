# services/portal-service/src/apps/api/views/aircraft_views.py
"""
Aircraft Functions
"""

import logging

from shared.common.permissions import IsPortalAdmin

from apps.core.services import AircraftService, PilotService
from ..serializers import AircraftSerializer, AircraftWriteSerializer, PilotSerializer
from .base import FunctionView

logger = logging.getLogger(__name__)


class GetAircraftAndPilotsView(FunctionView):
    """Fleet and pilot roster in one round trip."""

    function_name = 'get_aircraft_and_pilots'

    def invoke(self, request, body):
        return {
            'aircraft': AircraftSerializer(AircraftService.list_aircraft(), many=True).data,
            'pilots': PilotSerializer(PilotService.list_pilots(), many=True).data,
        }


class GetAllAircraftView(FunctionView):
    function_name = 'get_all_aircraft'

    def invoke(self, request, body):
        return AircraftSerializer(AircraftService.list_aircraft(), many=True).data


class GetAircraftByIdView(FunctionView):
    function_name = 'get_aircraft_by_id'

    def invoke(self, request, body):
        self.require(body, 'p_aircraft_id', message='Aircraft ID is required')
        aircraft = AircraftService.get_aircraft(self.parse_id(body['p_aircraft_id'], 'p_aircraft_id'))
        return AircraftSerializer(aircraft).data


class CreateAircraftView(FunctionView):
    function_name = 'create_aircraft'
    permission_classes = [IsPortalAdmin]

    def invoke(self, request, body):
        aircraft_data = self.require_mapping(body, 'p_aircraft_data', 'Aircraft data is required')
        aircraft = AircraftService.create_aircraft(self.validated(AircraftWriteSerializer, aircraft_data))
        return AircraftSerializer(aircraft).data


class UpdateAircraftView(FunctionView):
    function_name = 'update_aircraft'
    permission_classes = [IsPortalAdmin]

    def invoke(self, request, body):
        self.require(body, 'p_aircraft_id', message='Aircraft ID is required')
        aircraft_data = self.require_mapping(body, 'p_aircraft_data', 'Aircraft data is required')
        aircraft = AircraftService.update_aircraft(
            self.parse_id(body['p_aircraft_id'], 'p_aircraft_id'),
            self.validated(AircraftWriteSerializer, aircraft_data, partial=True)
        )
        return AircraftSerializer(aircraft).data


class DeleteAircraftView(FunctionView):
    function_name = 'delete_aircraft'
    permission_classes = [IsPortalAdmin]

    def invoke(self, request, body):
        self.require(body, 'p_aircraft_id', message='Aircraft ID is required')
        aircraft_id = self.parse_id(body['p_aircraft_id'], 'p_aircraft_id')
        AircraftService.delete_aircraft(aircraft_id)
        return {'id': str(aircraft_id)}
