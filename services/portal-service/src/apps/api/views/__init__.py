# services/portal-service/src/apps/api/views/__init__.py
"""
Portal Function Views
"""

from .base import FunctionView, UnknownFunctionView
from .pilot_views import (
    GetAllPilotsView,
    GetPilotByIdView,
    CreatePilotView,
    UpdatePilotView,
)
from .aircraft_views import (
    GetAircraftAndPilotsView,
    GetAllAircraftView,
    GetAircraftByIdView,
    CreateAircraftView,
    UpdateAircraftView,
    DeleteAircraftView,
)
from .flight_views import (
    GetAllFlightsView,
    GetFlightsByAircraftView,
    GetFlightByIdView,
    GetMostRecentFlightView,
    CreateFlightView,
    UpdateFlightView,
    DeleteFlightView,
)
from .safety_views import (
    GetAllSafetyReportsView,
    GetSafetyReportByIdView,
    CreateSafetyReportView,
    UpdateSafetyReportView,
    DeleteSafetyReportView,
)
from .target_views import (
    GetRouteTargetTimesView,
    UpsertRouteTargetTimeView,
    DeleteRouteTargetTimeView,
)
from .admin_views import IsAdminView, FixAdminAccessView, CheckFunctionsExistView

__all__ = [
    'FunctionView',
    'UnknownFunctionView',
    'GetAllPilotsView',
    'GetPilotByIdView',
    'CreatePilotView',
    'UpdatePilotView',
    'GetAircraftAndPilotsView',
    'GetAllAircraftView',
    'GetAircraftByIdView',
    'CreateAircraftView',
    'UpdateAircraftView',
    'DeleteAircraftView',
    'GetAllFlightsView',
    'GetFlightsByAircraftView',
    'GetFlightByIdView',
    'GetMostRecentFlightView',
    'CreateFlightView',
    'UpdateFlightView',
    'DeleteFlightView',
    'GetAllSafetyReportsView',
    'GetSafetyReportByIdView',
    'CreateSafetyReportView',
    'UpdateSafetyReportView',
    'DeleteSafetyReportView',
    'GetRouteTargetTimesView',
    'UpsertRouteTargetTimeView',
    'DeleteRouteTargetTimeView',
    'IsAdminView',
    'FixAdminAccessView',
    'CheckFunctionsExistView',
]
