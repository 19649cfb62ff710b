# services/portal-service/src/apps/core/services/exceptions.py
"""
Portal Service Exceptions

Domain exceptions raised by the service layer. They extend the shared
taxonomy so the API exception handler maps them to status codes.
"""

from typing import Optional, Dict, Any

from shared.common.exceptions import MissingFieldError, NotFoundError


class PilotNotFoundError(NotFoundError):
    """Raised when a pilot is not found."""

    def __init__(self, pilot_id: Any = None, message: str = None):
        super().__init__(resource='Pilot', resource_id=pilot_id, message=message)


class AircraftNotFoundError(NotFoundError):
    """Raised when an aircraft is not found."""

    def __init__(self, aircraft_id: Any = None, message: str = None):
        super().__init__(resource='Aircraft', resource_id=aircraft_id, message=message)


class FlightNotFoundError(NotFoundError):
    """Raised when a flight is not found."""

    def __init__(self, flight_id: Any = None, message: str = None):
        super().__init__(resource='Flight', resource_id=flight_id, message=message)


class SafetyReportNotFoundError(NotFoundError):
    """Raised when a safety report is not found."""

    def __init__(self, report_id: Any = None, message: str = None):
        super().__init__(resource='Safety report', resource_id=report_id, message=message)


class RouteTargetNotFoundError(NotFoundError):
    """Raised when a route target time is not found."""

    def __init__(self, target_id: Any = None, message: str = None):
        super().__init__(resource='Route target time', resource_id=target_id, message=message)


class PortalValidationError(MissingFieldError):
    """Raised when submitted values are present but invalid."""

    code = 'VALIDATION_ERROR'

    def __init__(
        self,
        message: str,
        field: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, fields=[field] if field else None, details=details)
