# services/portal-service/src/apps/core/services/aircraft_service.py
"""
Aircraft Service
"""

import uuid
import logging
from typing import Dict, Any

from django.db import transaction

from ..models import Aircraft
from .exceptions import AircraftNotFoundError, PortalValidationError

logger = logging.getLogger(__name__)


class AircraftService:
    """
    Service class for fleet aircraft.
    """

    @classmethod
    def list_aircraft(cls):
        return Aircraft.objects.all().order_by('tail_number')

    @classmethod
    def get_aircraft(cls, aircraft_id: uuid.UUID) -> Aircraft:
        try:
            return Aircraft.objects.get(id=aircraft_id)
        except (Aircraft.DoesNotExist, ValueError):
            raise AircraftNotFoundError(aircraft_id)

    @classmethod
    @transaction.atomic
    def create_aircraft(cls, aircraft_data: Dict[str, Any]) -> Aircraft:
        tail_number = aircraft_data.get('tail_number')
        if Aircraft.objects.filter(tail_number__iexact=tail_number).exists():
            raise PortalValidationError(
                f"Aircraft {tail_number} already exists",
                field='tail_number'
            )

        aircraft = Aircraft.objects.create(**aircraft_data)
        logger.info(f"Aircraft {aircraft.tail_number} created")
        return aircraft

    @classmethod
    @transaction.atomic
    def update_aircraft(cls, aircraft_id: uuid.UUID, aircraft_data: Dict[str, Any]) -> Aircraft:
        aircraft = cls.get_aircraft(aircraft_id)

        tail_number = aircraft_data.get('tail_number')
        if tail_number and Aircraft.objects.filter(
            tail_number__iexact=tail_number
        ).exclude(id=aircraft.id).exists():
            raise PortalValidationError(
                f"Aircraft {tail_number} already exists",
                field='tail_number'
            )

        for field, value in aircraft_data.items():
            setattr(aircraft, field, value)
        aircraft.save()

        logger.info(f"Aircraft {aircraft.tail_number} updated")
        return aircraft

    @classmethod
    @transaction.atomic
    def delete_aircraft(cls, aircraft_id: uuid.UUID) -> None:
        aircraft = cls.get_aircraft(aircraft_id)
        tail_number = aircraft.tail_number
        aircraft.delete()
        logger.info(f"Aircraft {tail_number} deleted")
