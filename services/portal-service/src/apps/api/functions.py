# services/portal-service/src/apps/api/functions.py
"""
Function Registry

Maps each portal function name to the view serving it.
"""

from . import views

FUNCTION_VIEWS = [
    views.GetAllPilotsView,
    views.GetPilotByIdView,
    views.CreatePilotView,
    views.UpdatePilotView,
    views.GetAircraftAndPilotsView,
    views.GetAllAircraftView,
    views.GetAircraftByIdView,
    views.CreateAircraftView,
    views.UpdateAircraftView,
    views.DeleteAircraftView,
    views.GetAllFlightsView,
    views.GetFlightsByAircraftView,
    views.GetFlightByIdView,
    views.GetMostRecentFlightView,
    views.CreateFlightView,
    views.UpdateFlightView,
    views.DeleteFlightView,
    views.GetAllSafetyReportsView,
    views.GetSafetyReportByIdView,
    views.CreateSafetyReportView,
    views.UpdateSafetyReportView,
    views.DeleteSafetyReportView,
    views.GetRouteTargetTimesView,
    views.UpsertRouteTargetTimeView,
    views.DeleteRouteTargetTimeView,
    views.IsAdminView,
    views.FixAdminAccessView,
    views.CheckFunctionsExistView,
]

FUNCTION_REGISTRY = {view.function_name: view for view in FUNCTION_VIEWS}

# Functions the portal front end calls
EXPECTED_FUNCTIONS = (
    'get_aircraft_and_pilots',
    'get_all_aircraft',
    'get_aircraft_by_id',
    'create_aircraft',
    'update_aircraft',
    'delete_aircraft',
    'get_all_pilots',
    'get_pilot_by_id',
    'create_pilot',
    'update_pilot',
    'get_all_flights',
    'get_flights_by_aircraft',
    'get_flight_by_id',
    'get_most_recent_flight',
    'create_flight',
    'update_flight',
    'delete_flight',
    'get_all_safety_reports',
    'get_safety_report_by_id',
    'create_safety_report',
    'update_safety_report',
    'delete_safety_report',
    'get_route_target_times',
    'upsert_route_target_time',
    'delete_route_target_time',
    'is_admin',
    'fix_admin_access',
)
