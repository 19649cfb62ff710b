# services/portal-service/src/apps/client/gateway.py
"""
Remote Data Gateway

Typed operations over the portal functions. Every operation returns a
``GatewayResult``; transport errors, failed envelopes and malformed data
are logged and come back as ``GatewayResult.fail(message)``. Nothing is
retried.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from shared.common.clients import FunctionsClient
from shared.common.exceptions import MalformedPayloadError, PortalError

from .types import (
    AdminReview,
    Aircraft,
    Flight,
    GatewayResult,
    Pilot,
    Record,
    RouteTargetTime,
    SafetyReport,
)

logger = logging.getLogger(__name__)

READ_ONLY_FIELDS = (
    'id', 'created_at', 'updated_at', 'pilot_name', 'reporter_name', 'aircraft_details',
)

SAFETY_REPORT_WIRE_FIELDS = {
    'report_date': 'reportDate',
    'reported_by': 'reporterName',
    'category': 'category',
    'description': 'description',
    'severity': 'severity',
    'status': 'status',
    'actions': 'actions',
    'location': 'location',
    'aircraft_id': 'aircraftId',
    'admin_review': 'adminReview',
}

RecordInput = Union[Record, Dict[str, Any]]


def _as_dict(record: Optional[RecordInput]) -> Dict[str, Any]:
    if record is None:
        return {}
    if isinstance(record, Record):
        return record.to_dict()
    return dict(record)


def _write_payload(record: Optional[RecordInput], drop_blank: bool = True) -> Dict[str, Any]:
    """Row fields the server accepts, without read-only and (optionally) null or blank values."""
    payload = {}
    for key, value in _as_dict(record).items():
        if key in READ_ONLY_FIELDS:
            continue
        if drop_blank and value in (None, ''):
            continue
        payload[key] = value
    return payload


def _safety_wire_payload(report: Optional[RecordInput], drop_blank: bool = True) -> Dict[str, Any]:
    payload = {}
    for key, value in _write_payload(report, drop_blank=drop_blank).items():
        if isinstance(value, AdminReview):
            value = value.to_dict()
        payload[SAFETY_REPORT_WIRE_FIELDS.get(key, key)] = value
    return payload


def _missing(values: Dict[str, Any], required: Iterable[str]) -> List[str]:
    return [name for name in required if values.get(name) in (None, '')]


class PortalGateway:
    """
    Client-side access to pilots, aircraft, flights, safety reports and
    route targets.

    Usage:
        client = FunctionsClient(access_token=token)
        gateway = PortalGateway(client)
        result = await gateway.list_flights()
        if result.success:
            ...
    """

    def __init__(self, functions_client: FunctionsClient):
        self.client = functions_client

    # ==========================================================================
    # Plumbing
    # ==========================================================================

    async def _call(
        self,
        name: str,
        body: Dict[str, Any] = None,
        parse: Callable[[Any], Any] = None,
        headers: Dict[str, str] = None
    ) -> GatewayResult:
        try:
            data = await self.client.invoke(name, body, headers=headers)
            if parse is not None:
                data = parse(data)
        except PortalError as e:
            logger.error(
                f"Function {name} failed: {e.message}",
                extra={'function': name, 'code': e.code}
            )
            return GatewayResult.fail(e.message)
        except Exception as e:
            logger.exception(f"Unexpected error calling function {name}")
            return GatewayResult.fail(str(e) or f"Function {name} failed")
        return GatewayResult.ok(data)

    @staticmethod
    def _many(record_type) -> Callable[[Any], List[Any]]:
        def parse(data):
            if not isinstance(data, list):
                raise MalformedPayloadError('Invalid data format')
            return [record_type.from_dict(item) for item in data if isinstance(item, dict)]
        return parse

    @staticmethod
    def _one(record_type, not_found: str = None) -> Callable[[Any], Any]:
        def parse(data):
            # Older deployments answered single-row lookups with a list
            if isinstance(data, list):
                data = data[0] if data else None
            if data is None and not_found:
                raise MalformedPayloadError(not_found)
            if data is None:
                return None
            if not isinstance(data, dict):
                raise MalformedPayloadError('Invalid data format')
            return record_type.from_dict(data)
        return parse

    @staticmethod
    def _validation_error(message: str, fields: List[str]) -> GatewayResult:
        logger.warning(f"{message}: missing {', '.join(fields)}")
        return GatewayResult.fail(message)

    # ==========================================================================
    # Pilots
    # ==========================================================================

    async def list_pilots(self) -> GatewayResult:
        """Pilots from the combined listing, falling back to get_all_pilots."""
        combined = await self._call('get_aircraft_and_pilots')
        if combined.success and isinstance(combined.data, dict) and isinstance(combined.data.get('pilots'), list):
            return GatewayResult.ok(self._many(Pilot)(combined.data['pilots']))

        logger.info("Combined listing unavailable, falling back to get_all_pilots")
        return await self._call('get_all_pilots', parse=self._many(Pilot))

    async def get_pilot(self, pilot_id: str) -> GatewayResult:
        if not pilot_id:
            return self._validation_error('Pilot ID is required', ['pilot_id'])
        return await self._call(
            'get_pilot_by_id',
            {'p_pilot_id': str(pilot_id)},
            parse=self._one(Pilot, not_found='Pilot not found')
        )

    async def create_pilot(self, pilot: RecordInput) -> GatewayResult:
        pilot_data = _write_payload(pilot)
        missing = _missing(pilot_data, ['name'])
        if missing:
            return self._validation_error('Pilot name is required', missing)
        return await self._call('create_pilot', {'p_pilot_data': pilot_data}, parse=self._one(Pilot))

    async def update_pilot(self, pilot_id: str, changes: RecordInput) -> GatewayResult:
        if not pilot_id:
            return self._validation_error('Pilot ID is required', ['pilot_id'])
        return await self._call(
            'update_pilot',
            {'p_pilot_id': str(pilot_id), 'p_pilot_data': _write_payload(changes, drop_blank=False)},
            parse=self._one(Pilot)
        )

    async def hide_pilot(self, pilot_id: str) -> GatewayResult:
        """Pilots are never deleted; hiding keeps their flights attributed."""
        return await self.update_pilot(pilot_id, {'is_hidden': True})

    # ==========================================================================
    # Aircraft
    # ==========================================================================

    async def list_aircraft(self) -> GatewayResult:
        """Aircraft from the combined listing, falling back to get_all_aircraft."""
        combined = await self._call('get_aircraft_and_pilots')
        if combined.success and isinstance(combined.data, dict) and isinstance(combined.data.get('aircraft'), list):
            return GatewayResult.ok(self._many(Aircraft)(combined.data['aircraft']))

        logger.info("Combined listing unavailable, falling back to get_all_aircraft")
        return await self._call('get_all_aircraft', parse=self._many(Aircraft))

    async def get_aircraft(self, aircraft_id: str) -> GatewayResult:
        if not aircraft_id:
            return self._validation_error('Aircraft ID is required', ['aircraft_id'])
        return await self._call(
            'get_aircraft_by_id',
            {'p_aircraft_id': str(aircraft_id)},
            parse=self._one(Aircraft, not_found='Aircraft not found')
        )

    async def create_aircraft(self, aircraft: RecordInput) -> GatewayResult:
        aircraft_data = _write_payload(aircraft)
        missing = _missing(aircraft_data, ['tail_number', 'make', 'model'])
        if missing:
            return self._validation_error('Missing required aircraft information', missing)
        return await self._call('create_aircraft', {'p_aircraft_data': aircraft_data}, parse=self._one(Aircraft))

    async def update_aircraft(self, aircraft_id: str, changes: RecordInput) -> GatewayResult:
        if not aircraft_id:
            return self._validation_error('Aircraft ID is required', ['aircraft_id'])
        return await self._call(
            'update_aircraft',
            {'p_aircraft_id': str(aircraft_id), 'p_aircraft_data': _write_payload(changes, drop_blank=False)},
            parse=self._one(Aircraft)
        )

    async def delete_aircraft(self, aircraft_id: str) -> GatewayResult:
        if not aircraft_id:
            return self._validation_error('Aircraft ID is required', ['aircraft_id'])
        return await self._call('delete_aircraft', {'p_aircraft_id': str(aircraft_id)})

    # ==========================================================================
    # Flights
    # ==========================================================================

    async def _pilot_names(self, pilot_ids: Iterable[str]) -> Dict[str, str]:
        """Look up pilot names one by one; a failed lookup maps to ''."""
        pilot_ids = list(dict.fromkeys(str(pid) for pid in pilot_ids if pid))
        results = await asyncio.gather(*(self.get_pilot(pid) for pid in pilot_ids))
        names = {}
        for pilot_id, result in zip(pilot_ids, results):
            if result.success and result.data is not None:
                names[pilot_id] = result.data.name or ''
            else:
                logger.warning(f"Pilot name lookup failed for {pilot_id}: {result.error}")
                names[pilot_id] = ''
        return names

    async def _enrich_flights(self, flights: List[Flight]) -> List[Flight]:
        unnamed = [flight for flight in flights if not flight.pilot_name and flight.pilot_id]
        if not unnamed:
            return flights
        names = await self._pilot_names(flight.pilot_id for flight in unnamed)
        for flight in unnamed:
            flight.pilot_name = names.get(str(flight.pilot_id), '')
        return flights

    async def _flights(self, name: str, body: Dict[str, Any] = None) -> GatewayResult:
        result = await self._call(name, body, parse=self._many(Flight))
        if result.success:
            await self._enrich_flights(result.data)
        return result

    async def list_flights(self) -> GatewayResult:
        return await self._flights('get_all_flights')

    async def list_flights_by_aircraft(self, aircraft_id: str) -> GatewayResult:
        if not aircraft_id:
            return self._validation_error('Aircraft ID is required', ['aircraft_id'])
        return await self._flights('get_flights_by_aircraft', {'p_aircraft_id': str(aircraft_id)})

    async def get_flight(self, flight_id: str) -> GatewayResult:
        if not flight_id:
            return self._validation_error('Flight ID is required', ['flight_id'])
        result = await self._call(
            'get_flight_by_id',
            {'p_flight_id': str(flight_id)},
            parse=self._one(Flight, not_found='Flight not found')
        )
        if result.success:
            await self._enrich_flights([result.data])
        return result

    async def get_most_recent_flight(self, aircraft_id: str) -> GatewayResult:
        """Latest flight of an aircraft; success with ``data=None`` when it has none."""
        if not aircraft_id:
            return self._validation_error('Aircraft ID is required', ['aircraft_id'])
        return await self._call(
            'get_most_recent_flight',
            {'p_aircraft_id': str(aircraft_id)},
            parse=self._one(Flight)
        )

    async def create_flight(self, flight: RecordInput, pilot_id: str) -> GatewayResult:
        if not pilot_id:
            return self._validation_error('Missing pilot ID', ['pilot_id'])

        flight_data = _write_payload(flight)
        missing = _missing(flight_data, ['date', 'aircraft_id', 'tach_start', 'tach_end'])
        if missing:
            return self._validation_error('Missing required flight information', missing)

        flight_data['pilot_id'] = str(pilot_id)
        return await self._call('create_flight', {'p_flight_data': flight_data}, parse=self._one(Flight))

    async def update_flight(self, flight_id: str, changes: RecordInput) -> GatewayResult:
        if not flight_id:
            return self._validation_error('Flight ID is required', ['flight_id'])
        return await self._call(
            'update_flight',
            {'p_flight_id': str(flight_id), 'p_flight_data': _write_payload(changes, drop_blank=False)},
            parse=self._one(Flight)
        )

    async def delete_flight(self, flight_id: str) -> GatewayResult:
        if not flight_id:
            return self._validation_error('Flight ID is required', ['flight_id'])
        return await self._call('delete_flight', {'p_flight_id': str(flight_id)})

    # ==========================================================================
    # Safety Reports
    # ==========================================================================

    async def _enrich_reports(self, reports: List[SafetyReport]) -> List[SafetyReport]:
        for report in reports:
            if not report.reporter_name and report.reported_by:
                report.reporter_name = report.reported_by

        unnamed = [report for report in reports if not report.reporter_name and report.reporter_id]
        if not unnamed:
            return reports
        names = await self._pilot_names(report.reporter_id for report in unnamed)
        for report in unnamed:
            report.reporter_name = names.get(str(report.reporter_id), '')
        return reports

    async def list_safety_reports(self) -> GatewayResult:
        result = await self._call('get_all_safety_reports', parse=self._many(SafetyReport))
        if result.success:
            await self._enrich_reports(result.data)
        return result

    async def get_safety_report(self, report_id: str) -> GatewayResult:
        if not report_id:
            return self._validation_error('Report ID is required', ['id'])
        result = await self._call(
            'get_safety_report_by_id',
            {'id': str(report_id)},
            parse=self._one(SafetyReport, not_found='Safety report not found')
        )
        if result.success:
            await self._enrich_reports([result.data])
        return result

    async def create_safety_report(self, report: RecordInput) -> GatewayResult:
        report_data = _write_payload(report)
        missing = _missing(report_data, ['report_date', 'category', 'severity', 'description'])
        if missing:
            return self._validation_error('Missing required safety report information', missing)
        return await self._call(
            'create_safety_report',
            _safety_wire_payload(report_data),
            parse=self._one(SafetyReport)
        )

    async def update_safety_report(self, report_id: str, changes: RecordInput) -> GatewayResult:
        if not report_id:
            return self._validation_error('Report ID is required', ['id'])
        return await self._call(
            'update_safety_report',
            {'id': str(report_id), 'reportData': _safety_wire_payload(changes, drop_blank=False)},
            parse=self._one(SafetyReport)
        )

    async def delete_safety_report(self, report_id: str) -> GatewayResult:
        if not report_id:
            return self._validation_error('Report ID is required', ['id'])
        return await self._call('delete_safety_report', {'id': str(report_id)})

    # ==========================================================================
    # Route Targets
    # ==========================================================================

    async def list_route_targets(self) -> GatewayResult:
        return await self._call('get_route_target_times', parse=self._many(RouteTargetTime))

    async def save_route_target(self, target: RecordInput) -> GatewayResult:
        """Create a target, or update it when it carries an ``id``."""
        values = _as_dict(target)
        target_data = _write_payload(values)
        missing = _missing(target_data, ['route', 'target_time'])
        if missing:
            return self._validation_error('Route and target time are required', missing)
        if values.get('id'):
            target_data['id'] = str(values['id'])
        return await self._call(
            'upsert_route_target_time',
            {'p_target_data': target_data},
            parse=self._one(RouteTargetTime)
        )

    async def delete_route_target(self, target_id: str) -> GatewayResult:
        if not target_id:
            return self._validation_error('Target ID is required', ['id'])
        return await self._call('delete_route_target_time', {'p_target_id': str(target_id)})

    # ==========================================================================
    # Admin
    # ==========================================================================

    async def check_is_admin(self, access_token: str) -> GatewayResult:
        """Privileged role check for the holder of ``access_token``."""
        if not access_token:
            return self._validation_error('Access token is required', ['access_token'])

        def parse(data):
            if not isinstance(data, dict) or 'isAdmin' not in data:
                raise MalformedPayloadError('Invalid data format')
            return bool(data['isAdmin'])

        return await self._call(
            'is_admin',
            headers={'Authorization': f"Bearer {access_token}"},
            parse=parse
        )

    async def fix_admin_access(self, email: str, user_id: str, name: str = None) -> GatewayResult:
        body = {'email': email, 'user_id': user_id, 'name': name}
        missing = _missing(body, ['email', 'user_id'])
        if missing:
            return self._validation_error('Email and user_id are required', missing)
        return await self._call('fix_admin_access', body)

    async def check_functions_exist(self) -> GatewayResult:
        return await self._call('check_functions_exist')
