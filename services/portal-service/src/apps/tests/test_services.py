# services/portal-service/src/apps/tests/test_services.py
"""
Service Tests

Tests for portal service business logic layer.
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest

from apps.core.services.exceptions import (
    FlightNotFoundError,
    PilotNotFoundError,
    PortalValidationError,
    RouteTargetNotFoundError,
)


# =============================================================================
# PilotService Tests
# =============================================================================

@pytest.mark.django_db
class TestPilotService:
    """Tests for PilotService."""

    def test_list_pilots_excludes_hidden(self, pilot, admin_pilot):
        from apps.core.services import PilotService
        admin_pilot.is_hidden = True
        admin_pilot.save()

        visible = PilotService.list_pilots(include_hidden=False)

        assert list(visible) == [pilot]
        assert PilotService.list_pilots().count() == 2

    def test_get_missing_pilot(self):
        from apps.core.services import PilotService

        with pytest.raises(PilotNotFoundError):
            PilotService.get_pilot(uuid.uuid4())

    def test_create_pilot_requires_name(self):
        from apps.core.services import PilotService

        with pytest.raises(PortalValidationError):
            PilotService.create_pilot({'name': '   '})

    def test_names_for(self, pilot, admin_pilot):
        from apps.core.services import PilotService

        names = PilotService.names_for([pilot.id, str(admin_pilot.id), None, uuid.uuid4()])

        assert names == {str(pilot.id): pilot.name, str(admin_pilot.id): admin_pilot.name}

    def test_find_or_create_reuses_existing(self, pilot):
        from apps.core.services import PilotService

        assert PilotService.find_or_create_by_name(f"  {pilot.name} ") == pilot

    def test_find_or_create_anonymous(self):
        from apps.core.services import PilotService

        assert PilotService.find_or_create_by_name('Anonymous') is None
        assert PilotService.find_or_create_by_name('') is None

    def test_is_admin_identity(self, pilot, admin_pilot):
        from apps.core.services.pilot_service import is_admin_identity

        assert is_admin_identity(user_id=admin_pilot.user_id) is True
        assert is_admin_identity(email=admin_pilot.email) is True
        assert is_admin_identity(user_id=pilot.user_id) is False
        assert is_admin_identity(user_id=str(uuid.uuid4())) is False

    def test_fix_admin_access_requires_identity(self):
        from apps.core.services import PilotService

        with pytest.raises(PortalValidationError):
            PilotService.fix_admin_access(email='', user_id='abc')

    def test_fix_admin_access_links_profile(self, pilot):
        from apps.core.models import Profile
        from apps.core.services import PilotService

        fixed, created = PilotService.fix_admin_access(email=pilot.email, user_id=pilot.user_id)

        assert created is False
        assert fixed.is_admin is True
        assert Profile.objects.get(user_id=pilot.user_id).pilot_id == pilot.id


# =============================================================================
# FlightService Tests
# =============================================================================

@pytest.mark.django_db
class TestFlightService:
    """Tests for FlightService."""

    def test_create_flight(self, flight_service, flight_data):
        flight = flight_service.create_flight(flight_data)

        assert flight.id is not None
        assert flight.tach_end - flight.tach_start == Decimal('1.5')

    def test_create_flight_rejects_backwards_tach(self, flight_service, flight_data):
        flight_data['tach_end'] = Decimal('2400.0')

        with pytest.raises(PortalValidationError):
            flight_service.create_flight(flight_data)

    def test_update_flight_rejects_backwards_tach(self, flight_service, flight):
        with pytest.raises(PortalValidationError):
            flight_service.update_flight(flight.id, {'tach_start': Decimal('9999.0')})

    def test_list_flights_newest_first(self, flight_service, flight_data):
        older = flight_service.create_flight({**flight_data, 'date': date(2024, 1, 1)})
        newer = flight_service.create_flight({**flight_data, 'date': date(2024, 2, 1)})

        assert list(flight_service.list_flights()) == [newer, older]

    def test_get_most_recent_flight_without_flights(self, flight_service, aircraft_id):
        assert flight_service.get_most_recent_flight(aircraft_id) is None

    def test_delete_missing_flight(self, flight_service):
        with pytest.raises(FlightNotFoundError):
            flight_service.delete_flight(uuid.uuid4())

    def test_pilot_names(self, flight_service, flight, pilot):
        assert flight_service.pilot_names([flight]) == {str(pilot.id): pilot.name}


# =============================================================================
# SafetyReportService Tests
# =============================================================================

@pytest.mark.django_db
class TestSafetyReportService:
    """Tests for SafetyReportService."""

    def test_reporter_names(self, safety_report, pilot):
        from apps.core.models import SafetyReport
        from apps.core.services import SafetyReportService

        named = SafetyReport.objects.create(
            report_date=date(2024, 5, 3),
            reported_by='Tower',
            category='other',
            description='Radio outage',
            severity='low',
        )
        orphan = SafetyReport.objects.create(
            report_date=date(2024, 5, 3),
            reporter_id=uuid.uuid4(),
            category='other',
            description='Unknown reporter',
            severity='low',
        )

        names = SafetyReportService.reporter_names([safety_report, named, orphan])

        assert names[str(safety_report.id)] == pilot.name
        assert names[str(named.id)] == 'Tower'
        assert names[str(orphan.id)] == 'Unknown'

    def test_aircraft_details_without_aircraft(self, safety_report):
        from apps.core.services import SafetyReportService
        safety_report.aircraft_id = None

        assert SafetyReportService.aircraft_details(safety_report) is None

    def test_create_report_links_reporter(self, pilot):
        from apps.core.services import SafetyReportService

        report = SafetyReportService.create_report({
            'report_date': date(2024, 5, 4),
            'reported_by': pilot.name,
            'category': 'other',
            'description': 'Loose fuel cap',
            'severity': 'low',
        })

        assert report.reporter_id == pilot.id
        assert report.is_open is True


# =============================================================================
# RouteTargetService Tests
# =============================================================================

@pytest.mark.django_db
class TestRouteTargetService:
    """Tests for RouteTargetService."""

    def test_upsert_create_then_update(self):
        from apps.core.services import RouteTargetService

        created = RouteTargetService.upsert_target({'route': 'KPAO-KSQL', 'target_time': Decimal('1.5')})
        updated = RouteTargetService.upsert_target({'id': created.id, 'target_time': Decimal('1.2')})

        assert updated.id == created.id
        assert updated.target_time == Decimal('1.2')

    def test_upsert_unknown_id(self):
        from apps.core.services import RouteTargetService

        with pytest.raises(RouteTargetNotFoundError):
            RouteTargetService.upsert_target({'id': uuid.uuid4(), 'target_time': Decimal('1.0')})
