# services/portal-service/src/apps/tests/conftest.py
"""
Pytest Configuration and Fixtures

Shared fixtures for portal service tests.
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from rest_framework.test import APIClient


# =============================================================================
# Change Stream
# =============================================================================

@pytest.fixture(autouse=True)
def change_publisher():
    """Fresh in-memory publisher for every test."""
    from shared.common.events import get_change_publisher, reset_change_publisher
    reset_change_publisher()
    publisher = get_change_publisher()
    yield publisher
    reset_change_publisher()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


# =============================================================================
# UUID Fixtures
# =============================================================================

@pytest.fixture
def aircraft_id():
    """Generate aircraft ID."""
    return uuid.uuid4()


@pytest.fixture
def user_id():
    """Generate auth user ID."""
    return str(uuid.uuid4())


# =============================================================================
# Model Fixtures
# =============================================================================

@pytest.fixture
def pilot(db):
    """Create a regular pilot linked to an auth user."""
    from apps.core.models import Pilot
    return Pilot.objects.create(
        name='Kari Nordmann',
        email='kari@example.com',
        user_id=str(uuid.uuid4()),
    )


@pytest.fixture
def admin_pilot(db):
    """Create an admin pilot linked to an auth user."""
    from apps.core.models import Pilot
    return Pilot.objects.create(
        name='Ola Admin',
        email='admin@example.com',
        user_id=str(uuid.uuid4()),
        is_admin=True,
    )


@pytest.fixture
def aircraft(db):
    """Create an aircraft."""
    from apps.core.models import Aircraft
    return Aircraft.objects.create(
        tail_number='N12345',
        make='Cessna',
        model='172S',
        year=2004,
        tach_time=Decimal('2450.3'),
    )


@pytest.fixture
def flight_data(aircraft, pilot):
    """Generate basic flight data."""
    return {
        'aircraft_id': aircraft.id,
        'pilot_id': pilot.id,
        'date': date(2024, 5, 1),
        'tach_start': Decimal('2450.3'),
        'tach_end': Decimal('2451.8'),
        'hobbs_time': Decimal('1.6'),
        'fuel_added': Decimal('10.0'),
        'passenger_count': 2,
        'route': 'KPAO-KSQL',
    }


@pytest.fixture
def flight(db, flight_data):
    """Create a flight in database."""
    from apps.core.models import Flight
    return Flight.objects.create(**flight_data)


@pytest.fixture
def safety_report(db, pilot, aircraft):
    """Create a safety report."""
    from apps.core.models import SafetyReport
    return SafetyReport.objects.create(
        report_date=date(2024, 5, 2),
        reporter_id=pilot.id,
        reported_by='',
        category='runway-incursion',
        description='Crossed hold short line',
        severity='medium',
        aircraft_id=aircraft.id,
    )


@pytest.fixture
def route_target(db):
    """Create a route target time."""
    from apps.core.models import RouteTargetTime
    return RouteTargetTime.objects.create(route='KPAO-KSQL', target_time=Decimal('1.50'))


# =============================================================================
# Auth Fixtures
# =============================================================================

@pytest.fixture
def make_token():
    """Build a bearer token for an auth user."""
    from shared.common.authentication import JWTTokenGenerator

    def _make_token(user_id, email=None, name=None):
        return JWTTokenGenerator.generate_access_token(user_id=user_id, email=email, name=name)

    return _make_token


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def service_client():
    """API client holding the service key."""
    client = APIClient()
    client.credentials(HTTP_APIKEY='test-service-key')
    return client


@pytest.fixture
def pilot_client(pilot, make_token):
    """API client signed in as a regular pilot."""
    client = APIClient()
    client.credentials(
        HTTP_APIKEY='test-anon-key',
        HTTP_AUTHORIZATION=f"Bearer {make_token(pilot.user_id, pilot.email, pilot.name)}"
    )
    return client


@pytest.fixture
def admin_client(admin_pilot, make_token):
    """API client signed in as an admin pilot."""
    client = APIClient()
    client.credentials(
        HTTP_APIKEY='test-anon-key',
        HTTP_AUTHORIZATION=f"Bearer {make_token(admin_pilot.user_id, admin_pilot.email, admin_pilot.name)}"
    )
    return client


@pytest.fixture
def call_function():
    """POST a JSON body to a portal function."""

    def _call(client, name, body=None):
        return client.post(f'/functions/v1/{name}/', body or {}, format='json')

    return _call


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def flight_service():
    """Get FlightService class."""
    from apps.core.services import FlightService
    return FlightService


@pytest.fixture
def statistics_service():
    """Get StatisticsService class."""
    from apps.core.services import StatisticsService
    return StatisticsService
