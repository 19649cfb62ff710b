# services/portal-service/src/apps/core/models/__init__.py
"""
Portal Service Models

Database models for the pilot portal:
- Pilots and their auth profile links
- Aircraft
- Flights
- Safety reports
- Route target times
"""

from .pilot import Pilot, Profile
from .aircraft import Aircraft
from .flight import Flight
from .safety_report import SafetyReport
from .route_target import RouteTargetTime

__all__ = [
    'Pilot',
    'Profile',
    'Aircraft',
    'Flight',
    'SafetyReport',
    'RouteTargetTime',
]
