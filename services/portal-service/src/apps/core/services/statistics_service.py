# services/portal-service/src/apps/core/services/statistics_service.py
"""
Statistics Service

Route analytics and flight totals. Pure computations over flight and
target records; they accept model instances, client dataclasses or plain
mappings with the same field names.
"""

import math
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Dict, Any, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

UNKNOWN_ROUTE = 'Unknown'
NO_TARGET_PERCENT = '0% over'

TARGET_QUALIFIERS = ('aircraft_id', 'pilot_id', 'month', 'year')

# Filter left open: any target qualifier matches
ANY_QUALIFIER = object()


@dataclass
class RouteStats:
    """Aggregated hobbs statistics for one route."""

    route: str
    count: int = 0
    total_hobbs: float = 0.0
    avg_hobbs: float = 0.0
    target_time: Optional[float] = None
    variance_from_target: float = 0.0
    formatted_percent_from_target: str = NO_TARGET_PERCENT
    flights: List[Any] = field(default_factory=list)


@dataclass
class RouteAnalytics:
    """One row of the filtered route analytics table."""

    route: str
    flight_count: int = 0
    average_time: float = 0.0
    target_time: Optional[float] = None
    difference: Optional[float] = None
    percent_diff: Optional[float] = None


@dataclass
class FlightSummary:
    """Fleet totals shown on the dashboard."""

    total_flights: int = 0
    total_hours: float = 0.0
    total_fuel: float = 0.0
    total_oil: float = 0.0
    total_passengers: int = 0
    active_aircraft: int = 0
    recent_squawks: List[Dict[str, Any]] = field(default_factory=list)


def _value(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def _number(value: Any) -> float:
    if value is None or value == '':
        return 0.0
    if isinstance(value, Decimal):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _js_round(value: float) -> int:
    """Round half toward positive infinity."""
    return int(math.floor(value + 0.5))


def _timestamp(value: Any) -> datetime:
    """Comparable naive UTC datetime; missing or unparseable is the minimum."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return datetime.min
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)

    if not isinstance(value, datetime):
        return datetime.min
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _to_fixed(value: float, places: int) -> float:
    """Half-up rounding of the exact binary value, as number formatting does."""
    return float(Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def _flight_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def flight_time(flight: Any) -> float:
    """Hobbs time, or the forward tach delta when no hobbs time was logged."""
    hobbs = _number(_value(flight, 'hobbs_time'))
    if hobbs:
        return hobbs
    tach_start = _number(_value(flight, 'tach_start'))
    tach_end = _number(_value(flight, 'tach_end'))
    return tach_end - tach_start if tach_end > tach_start else 0.0


def _same(qualifier: Any, actual: Any) -> bool:
    if qualifier is None or qualifier == '':
        return True
    if actual is None:
        return False
    return str(qualifier) == str(actual)


class StatisticsService:
    """
    Service class for flight statistics and route analytics.
    """

    # ==========================================================================
    # Route Statistics
    # ==========================================================================

    @classmethod
    def select_target(
        cls,
        route: str,
        targets: Sequence[Any],
        aircraft_id: Any = None,
        pilot_id: Any = None,
        today: date = None
    ) -> Optional[Any]:
        """
        Pick the best target for a route.

        A target matches when its route is equal and every qualifier it sets
        equals the given aircraft, pilot and today's month and year. Among
        matches the most qualified target wins, then the most recently
        updated, then the earliest in ``targets``.
        """
        today = today or date.today()
        context = {
            'aircraft_id': aircraft_id,
            'pilot_id': pilot_id,
            'month': today.month,
            'year': today.year,
        }

        return cls._best_target(route, targets, context)

    @staticmethod
    def _best_target(route: str, targets: Sequence[Any], context: Dict[str, Any]) -> Optional[Any]:
        """
        Most qualified matching target, then most recently updated, then
        earliest in ``targets``. A context value of ``ANY_QUALIFIER`` accepts
        whatever the target sets for that qualifier.
        """
        best = None
        best_key: Optional[Tuple] = None
        for index, target in enumerate(targets):
            if _value(target, 'route') != route:
                continue
            if not all(
                context[name] is ANY_QUALIFIER or _same(_value(target, name), context[name])
                for name in TARGET_QUALIFIERS
            ):
                continue

            specificity = sum(
                1 for name in TARGET_QUALIFIERS
                if _value(target, name) not in (None, '')
            )
            key = (
                specificity,
                _timestamp(_value(target, 'updated_at')),
                _timestamp(_value(target, 'created_at')),
                -index,
            )
            if best_key is None or key > best_key:
                best, best_key = target, key

        return best

    @classmethod
    def calculate_route_stats(
        cls,
        flights: Sequence[Any],
        targets: Sequence[Any] = (),
        today: date = None
    ) -> List[RouteStats]:
        """
        Group flights by route and compare each route's average hobbs time
        against its best matching target.

        Routes are returned in first-seen order. With no target (or a zero
        target) the variance is 0 and the percent reads ``"0% over"``.
        """
        groups: Dict[str, List[Any]] = {}
        for flight in flights:
            route = _value(flight, 'route') or UNKNOWN_ROUTE
            groups.setdefault(route, []).append(flight)

        results = []
        for route, route_flights in groups.items():
            count = len(route_flights)
            total_hobbs = sum(_number(_value(flight, 'hobbs_time')) for flight in route_flights)
            avg_hobbs = total_hobbs / count if count else 0.0

            first = route_flights[0]
            target = cls.select_target(
                route,
                targets,
                aircraft_id=_value(first, 'aircraft_id'),
                pilot_id=_value(first, 'pilot_id'),
                today=today,
            )

            stats = RouteStats(
                route=route,
                count=count,
                total_hobbs=total_hobbs,
                avg_hobbs=avg_hobbs,
                flights=list(route_flights),
            )

            target_time = _number(_value(target, 'target_time')) if target is not None else 0.0
            if target_time:
                percent = _js_round(avg_hobbs / target_time * 100 - 100)
                stats.target_time = target_time
                stats.variance_from_target = avg_hobbs - target_time
                stats.formatted_percent_from_target = (
                    f"{abs(percent)}% {'under' if target_time > avg_hobbs else 'over'}"
                )

            results.append(stats)

        logger.debug(f"Route stats computed for {len(results)} routes from {len(flights)} flights")
        return results

    # ==========================================================================
    # Filtered Route Analytics
    # ==========================================================================

    @classmethod
    def filter_flights(
        cls,
        flights: Sequence[Any],
        month: int = None,
        year: int = None,
        aircraft_id: Any = None,
        pilot_id: Any = None
    ) -> List[Any]:
        """Flights matching every filter that is set; None means all."""
        selected = []
        for flight in flights:
            if month is not None or year is not None:
                flown = _flight_date(_value(flight, 'date'))
                if flown is None:
                    continue
                if month is not None and flown.month != int(month):
                    continue
                if year is not None and flown.year != int(year):
                    continue
            if aircraft_id is not None and str(_value(flight, 'aircraft_id')) != str(aircraft_id):
                continue
            if pilot_id is not None and str(_value(flight, 'pilot_id')) != str(pilot_id):
                continue
            selected.append(flight)
        return selected

    @classmethod
    def available_years(cls, flights: Sequence[Any]) -> List[int]:
        """Distinct flight years for the year filter, newest first."""
        flown = (_flight_date(_value(flight, 'date')) for flight in flights)
        return sorted({day.year for day in flown if day is not None}, reverse=True)

    @classmethod
    def route_analytics(
        cls,
        flights: Sequence[Any],
        targets: Sequence[Any] = (),
        month: int = None,
        year: int = None,
        aircraft_id: Any = None,
        pilot_id: Any = None,
        sort_field: str = 'route',
        descending: bool = False
    ) -> List[RouteAnalytics]:
        """
        Per-route average flight time for the filtered flights, compared
        with the target that fits the selected filters.

        Flight time is hobbs, falling back to the tach delta. Averages and
        differences are rounded to 2 places, percentages to 1; a zero
        target has no percentage. Rows sort on ``sort_field`` with missing
        values last in either direction.
        """
        selected = cls.filter_flights(flights, month, year, aircraft_id, pilot_id)
        filters = {'aircraft_id': aircraft_id, 'pilot_id': pilot_id, 'month': month, 'year': year}
        context = {name: ANY_QUALIFIER if value is None else value for name, value in filters.items()}

        groups: Dict[str, List[Any]] = {}
        for flight in selected:
            groups.setdefault(_value(flight, 'route') or UNKNOWN_ROUTE, []).append(flight)

        rows = []
        for route, route_flights in groups.items():
            average = sum(flight_time(flight) for flight in route_flights) / len(route_flights)
            row = RouteAnalytics(
                route=route,
                flight_count=len(route_flights),
                average_time=_to_fixed(average, 2),
            )

            target = cls._best_target(route, targets, context)
            if target is not None:
                target_time = _number(_value(target, 'target_time'))
                row.target_time = target_time
                row.difference = _to_fixed(average - target_time, 2)
                if target_time:
                    row.percent_diff = _to_fixed((average - target_time) / target_time * 100, 1)
            rows.append(row)

        present = [row for row in rows if getattr(row, sort_field, None) is not None]
        missing = [row for row in rows if getattr(row, sort_field, None) is None]
        present.sort(key=lambda row: getattr(row, sort_field), reverse=descending)

        logger.debug(
            f"Route analytics for {len(rows)} routes from {len(selected)} of {len(flights)} flights",
            extra={'month': month, 'year': year}
        )
        return present + missing

    # ==========================================================================
    # Totals
    # ==========================================================================

    @classmethod
    def summarize_flights(
        cls,
        flights: Sequence[Any],
        aircraft_tail_numbers: Dict[str, str] = None,
        recent_squawk_limit: int = 5
    ) -> FlightSummary:
        """Fleet totals plus the most recent squawks, newest first."""
        summary = FlightSummary(total_flights=len(flights))
        aircraft_ids = set()
        squawks = []

        for flight in flights:
            summary.total_hours += _number(_value(flight, 'hobbs_time'))
            summary.total_fuel += _number(_value(flight, 'fuel_added'))
            summary.total_oil += _number(_value(flight, 'oil_added'))
            summary.total_passengers += int(_number(_value(flight, 'passenger_count')))

            aircraft_id = _value(flight, 'aircraft_id')
            if aircraft_id:
                aircraft_ids.add(str(aircraft_id))

            text = (_value(flight, 'squawks') or '').strip()
            if text:
                squawks.append({
                    'id': str(_value(flight, 'id')),
                    'aircraft': (aircraft_tail_numbers or {}).get(str(aircraft_id), str(aircraft_id or '')),
                    'date': _value(flight, 'date'),
                    'description': text,
                })

        squawks.sort(key=lambda squawk: _timestamp(squawk['date']), reverse=True)
        summary.active_aircraft = len(aircraft_ids)
        summary.recent_squawks = squawks[:recent_squawk_limit]
        return summary
