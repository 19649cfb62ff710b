# services/portal-service/src/apps/api/views/flight_views.py
"""
Flight Functions

Flight reads carry ``pilot_name`` for every flight whose pilot exists.
"""

import logging

from shared.common.permissions import IsPortalAdmin

from apps.core.services import FlightService
from ..serializers import FlightSerializer, FlightWriteSerializer
from .base import FunctionView

logger = logging.getLogger(__name__)


def serialize_flights(flights):
    flights = list(flights)
    return FlightSerializer(
        flights,
        many=True,
        context={'pilot_names': FlightService.pilot_names(flights)}
    ).data


def serialize_flight(flight):
    return FlightSerializer(
        flight,
        context={'pilot_names': FlightService.pilot_names([flight])}
    ).data


class GetAllFlightsView(FunctionView):
    function_name = 'get_all_flights'

    def invoke(self, request, body):
        return serialize_flights(FlightService.list_flights())


class GetFlightsByAircraftView(FunctionView):
    function_name = 'get_flights_by_aircraft'

    def invoke(self, request, body):
        self.require(body, 'p_aircraft_id', message='Aircraft ID is required')
        aircraft_id = self.parse_id(body['p_aircraft_id'], 'p_aircraft_id')
        return serialize_flights(FlightService.list_flights(aircraft_id=aircraft_id))


class GetFlightByIdView(FunctionView):
    function_name = 'get_flight_by_id'

    def invoke(self, request, body):
        self.require(body, 'p_flight_id', message='Flight ID is required')
        flight = FlightService.get_flight(self.parse_id(body['p_flight_id'], 'p_flight_id'))
        return serialize_flight(flight)


class GetMostRecentFlightView(FunctionView):
    """Latest flight of an aircraft, or null when it has none."""

    function_name = 'get_most_recent_flight'

    def invoke(self, request, body):
        self.require(body, 'p_aircraft_id', message='Aircraft ID is required')
        flight = FlightService.get_most_recent_flight(self.parse_id(body['p_aircraft_id'], 'p_aircraft_id'))
        if flight is None:
            return None
        return serialize_flight(flight)


class CreateFlightView(FunctionView):
    function_name = 'create_flight'

    def invoke(self, request, body):
        flight_data = self.require_mapping(body, 'p_flight_data', 'Flight data is required')
        flight = FlightService.create_flight(self.validated(FlightWriteSerializer, flight_data))
        return serialize_flight(flight)


class UpdateFlightView(FunctionView):
    function_name = 'update_flight'

    def invoke(self, request, body):
        self.require(body, 'p_flight_id', message='Flight ID and flight data are required')
        flight_data = self.require_mapping(body, 'p_flight_data', 'Flight ID and flight data are required')
        flight = FlightService.update_flight(
            self.parse_id(body['p_flight_id'], 'p_flight_id'),
            self.validated(FlightWriteSerializer, flight_data, partial=True)
        )
        return serialize_flight(flight)


class DeleteFlightView(FunctionView):
    function_name = 'delete_flight'
    permission_classes = [IsPortalAdmin]

    def invoke(self, request, body):
        self.require(body, 'p_flight_id', message='Flight ID is required')
        flight_id = self.parse_id(body['p_flight_id'], 'p_flight_id')
        FlightService.delete_flight(flight_id)
        return {'id': str(flight_id)}
