# services/portal-service/src/apps/api/serializers/__init__.py
"""
Portal Function Serializers
"""

from .pilot_serializers import PilotSerializer, PilotWriteSerializer
from .aircraft_serializers import AircraftSerializer, AircraftWriteSerializer
from .flight_serializers import FlightSerializer, FlightWriteSerializer
from .safety_serializers import (
    AdminReviewSerializer,
    SafetyReportSerializer,
    SafetyReportInputSerializer,
)
from .target_serializers import RouteTargetTimeSerializer, RouteTargetTimeWriteSerializer

__all__ = [
    'PilotSerializer',
    'PilotWriteSerializer',
    'AircraftSerializer',
    'AircraftWriteSerializer',
    'FlightSerializer',
    'FlightWriteSerializer',
    'AdminReviewSerializer',
    'SafetyReportSerializer',
    'SafetyReportInputSerializer',
    'RouteTargetTimeSerializer',
    'RouteTargetTimeWriteSerializer',
]
