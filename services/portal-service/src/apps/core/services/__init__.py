# services/portal-service/src/apps/core/services/__init__.py
"""
Portal Service - Service Layer

Business logic for pilots, aircraft, flights, safety reports, route
targets and route analytics.
"""

from .exceptions import (
    PilotNotFoundError,
    AircraftNotFoundError,
    FlightNotFoundError,
    SafetyReportNotFoundError,
    RouteTargetNotFoundError,
    PortalValidationError,
)

from .pilot_service import PilotService, is_admin_identity
from .aircraft_service import AircraftService
from .flight_service import FlightService
from .safety_service import SafetyReportService
from .target_service import RouteTargetService
from .statistics_service import StatisticsService, RouteStats, RouteAnalytics, FlightSummary

__all__ = [
    # Exceptions
    'PilotNotFoundError',
    'AircraftNotFoundError',
    'FlightNotFoundError',
    'SafetyReportNotFoundError',
    'RouteTargetNotFoundError',
    'PortalValidationError',

    # Services
    'PilotService',
    'is_admin_identity',
    'AircraftService',
    'FlightService',
    'SafetyReportService',
    'RouteTargetService',
    'StatisticsService',

    # Results
    'RouteStats',
    'RouteAnalytics',
    'FlightSummary',
]
