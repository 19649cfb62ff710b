# services/portal-service/src/apps/core/services/flight_service.py
"""
Flight Service

Core business logic for flight log operations.
"""

import uuid
import logging
from typing import Dict, Any, List, Optional

from django.db import transaction

from ..models import Flight
from .exceptions import FlightNotFoundError, PortalValidationError
from .pilot_service import PilotService

logger = logging.getLogger(__name__)


class FlightService:
    """
    Service class for flight log operations.

    Handles flight CRUD and the pilot name lookups used by flight read views.
    """

    # ==========================================================================
    # Reads
    # ==========================================================================

    @classmethod
    def list_flights(cls, aircraft_id: uuid.UUID = None):
        queryset = Flight.objects.all().order_by('-date', '-created_at')
        if aircraft_id:
            queryset = queryset.filter(aircraft_id=aircraft_id)
        return queryset

    @classmethod
    def get_flight(cls, flight_id: uuid.UUID) -> Flight:
        try:
            return Flight.objects.get(id=flight_id)
        except (Flight.DoesNotExist, ValueError):
            raise FlightNotFoundError(flight_id)

    @classmethod
    def get_most_recent_flight(cls, aircraft_id: uuid.UUID) -> Optional[Flight]:
        return (
            Flight.objects.filter(aircraft_id=aircraft_id)
            .order_by('-date', '-created_at')
            .first()
        )

    @classmethod
    def pilot_names(cls, flights: List[Flight]) -> Dict[str, str]:
        return PilotService.names_for(flight.pilot_id for flight in flights)

    # ==========================================================================
    # Writes
    # ==========================================================================

    @classmethod
    @transaction.atomic
    def create_flight(cls, flight_data: Dict[str, Any]) -> Flight:
        """
        Create a flight log entry.

        Raises:
            PortalValidationError: If tach readings run backwards
        """
        flight = Flight(**flight_data)
        cls._validate(flight)
        flight.save()

        logger.info(
            f"Flight {flight.id} created for pilot {flight.pilot_id}",
            extra={'aircraft_id': str(flight.aircraft_id), 'route': flight.route}
        )
        return flight

    @classmethod
    @transaction.atomic
    def update_flight(cls, flight_id: uuid.UUID, flight_data: Dict[str, Any]) -> Flight:
        flight = cls.get_flight(flight_id)

        for field, value in flight_data.items():
            setattr(flight, field, value)

        cls._validate(flight)
        flight.save()

        logger.info(f"Flight {flight.id} updated: {', '.join(sorted(flight_data))}")
        return flight

    @classmethod
    @transaction.atomic
    def delete_flight(cls, flight_id: uuid.UUID) -> None:
        flight = cls.get_flight(flight_id)
        flight.delete()
        logger.info(f"Flight {flight_id} deleted")

    @staticmethod
    def _validate(flight: Flight) -> None:
        errors = flight.validate_times()
        if errors:
            raise PortalValidationError('; '.join(errors), field='tach_end')
