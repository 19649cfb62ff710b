# services/portal-service/src/apps/tests/test_statistics.py
"""
Statistics Tests

Route analytics and flight totals over plain row mappings.
"""

from datetime import date

import pytest

from apps.core.services import StatisticsService
from apps.core.services.statistics_service import UNKNOWN_ROUTE

TODAY = date(2024, 5, 15)
AIRCRAFT = 'a1'
PILOT = 'p1'


def make_flight(route='KPAO-KSQL', hobbs=1.0, **extra):
    return {
        'route': route,
        'hobbs_time': hobbs,
        'aircraft_id': AIRCRAFT,
        'pilot_id': PILOT,
        **extra,
    }


def make_target(target_time, route='KPAO-KSQL', **extra):
    return {'route': route, 'target_time': target_time, **extra}


class TestRouteStats:
    """Tests for calculate_route_stats."""

    def test_groups_in_first_seen_order(self):
        flights = [
            make_flight('B', 1.0),
            make_flight('A', 2.0),
            make_flight('B', 3.0),
        ]

        stats = StatisticsService.calculate_route_stats(flights, today=TODAY)

        assert [item.route for item in stats] == ['B', 'A']
        assert stats[0].count == 2
        assert stats[0].total_hobbs == pytest.approx(4.0)
        assert stats[0].avg_hobbs == pytest.approx(2.0)
        assert len(stats[0].flights) == 2

    def test_missing_route_is_unknown(self):
        stats = StatisticsService.calculate_route_stats(
            [make_flight(None, 1.0), make_flight('', 2.0)], today=TODAY
        )

        assert [item.route for item in stats] == [UNKNOWN_ROUTE]
        assert stats[0].count == 2

    def test_no_target(self):
        stats = StatisticsService.calculate_route_stats([make_flight(hobbs=1.4)], today=TODAY)

        assert stats[0].target_time is None
        assert stats[0].variance_from_target == 0
        assert stats[0].formatted_percent_from_target == '0% over'

    def test_zero_target_is_no_target(self):
        stats = StatisticsService.calculate_route_stats(
            [make_flight(hobbs=1.4)], [make_target(0)], today=TODAY
        )

        assert stats[0].variance_from_target == 0
        assert stats[0].formatted_percent_from_target == '0% over'

    def test_over_target(self):
        stats = StatisticsService.calculate_route_stats(
            [make_flight(hobbs=1.2), make_flight(hobbs=1.3)], [make_target(1.0)], today=TODAY
        )

        assert stats[0].target_time == 1.0
        assert stats[0].variance_from_target == pytest.approx(0.25)
        assert stats[0].formatted_percent_from_target == '25% over'

    def test_under_target(self):
        stats = StatisticsService.calculate_route_stats(
            [make_flight(hobbs=0.9)], [make_target(1.2)], today=TODAY
        )

        assert stats[0].variance_from_target == pytest.approx(-0.3)
        assert stats[0].formatted_percent_from_target == '25% under'

    def test_rounds_half_toward_positive_infinity(self):
        # -12.5% rounds to -12, 12.5% rounds to 13
        under = StatisticsService.calculate_route_stats(
            [make_flight(hobbs=0.875)], [make_target(1.0)], today=TODAY
        )
        over = StatisticsService.calculate_route_stats(
            [make_flight(hobbs=1.125)], [make_target(1.0)], today=TODAY
        )

        assert under[0].formatted_percent_from_target == '12% under'
        assert over[0].formatted_percent_from_target == '13% over'

    def test_on_target_reads_over(self):
        stats = StatisticsService.calculate_route_stats(
            [make_flight(hobbs=1.5)], [make_target(1.5)], today=TODAY
        )

        assert stats[0].formatted_percent_from_target == '0% over'

    def test_string_hobbs_values(self):
        stats = StatisticsService.calculate_route_stats(
            [make_flight(hobbs='1.5'), make_flight(hobbs=None)], today=TODAY
        )

        assert stats[0].total_hobbs == pytest.approx(1.5)
        assert stats[0].avg_hobbs == pytest.approx(0.75)


class TestSelectTarget:
    """Tests for target selection."""

    def test_most_specific_wins(self):
        general = make_target(1.0)
        for_aircraft = make_target(1.1, aircraft_id=AIRCRAFT)
        for_aircraft_and_month = make_target(1.2, aircraft_id=AIRCRAFT, month=5)

        chosen = StatisticsService.select_target(
            'KPAO-KSQL', [general, for_aircraft_and_month, for_aircraft],
            aircraft_id=AIRCRAFT, pilot_id=PILOT, today=TODAY
        )

        assert chosen is for_aircraft_and_month

    def test_qualifier_mismatch_excludes(self):
        other_aircraft = make_target(1.1, aircraft_id='other')
        other_year = make_target(1.2, year=2023)
        general = make_target(1.0)

        chosen = StatisticsService.select_target(
            'KPAO-KSQL', [other_aircraft, other_year, general],
            aircraft_id=AIRCRAFT, pilot_id=PILOT, today=TODAY
        )

        assert chosen is general

    def test_route_must_match(self):
        chosen = StatisticsService.select_target(
            'KPAO-KSQL', [make_target(1.0, route='KPAO-KHAF')], today=TODAY
        )

        assert chosen is None

    def test_tie_prefers_recently_updated(self):
        older = make_target(1.0, updated_at='2024-01-01T00:00:00Z')
        newer = make_target(1.1, updated_at='2024-03-01T00:00:00Z')

        chosen = StatisticsService.select_target('KPAO-KSQL', [older, newer], today=TODAY)

        assert chosen is newer

    def test_tie_falls_back_to_created_at(self):
        older = make_target(1.0, created_at='2024-01-01T00:00:00+00:00')
        newer = make_target(1.1, created_at='2024-02-01T00:00:00+00:00')

        chosen = StatisticsService.select_target('KPAO-KSQL', [newer, older], today=TODAY)

        assert chosen is newer

    def test_full_tie_keeps_input_order(self):
        first = make_target(1.0)
        second = make_target(1.1)

        chosen = StatisticsService.select_target('KPAO-KSQL', [first, second], today=TODAY)

        assert chosen is first

    def test_uses_first_flight_of_group(self):
        flights = [
            make_flight(hobbs=1.0, aircraft_id='x'),
            make_flight(hobbs=1.0, aircraft_id=AIRCRAFT),
        ]
        targets = [make_target(2.0, aircraft_id=AIRCRAFT), make_target(1.0)]

        stats = StatisticsService.calculate_route_stats(flights, targets, today=TODAY)

        assert stats[0].target_time == 1.0


class TestSummarizeFlights:
    """Tests for summarize_flights."""

    def test_totals(self):
        flights = [
            make_flight(hobbs=1.5, fuel_added=10, oil_added=0.5, passenger_count=2, id='f1', date='2024-05-01'),
            make_flight(hobbs=2.0, fuel_added='5.5', passenger_count=None, id='f2', date='2024-05-02',
                        aircraft_id='a2', squawks='Left brake soft'),
        ]

        summary = StatisticsService.summarize_flights(flights, aircraft_tail_numbers={'a2': 'N999'})

        assert summary.total_flights == 2
        assert summary.total_hours == pytest.approx(3.5)
        assert summary.total_fuel == pytest.approx(15.5)
        assert summary.total_oil == pytest.approx(0.5)
        assert summary.total_passengers == 2
        assert summary.active_aircraft == 2
        assert summary.recent_squawks == [{
            'id': 'f2',
            'aircraft': 'N999',
            'date': '2024-05-02',
            'description': 'Left brake soft',
        }]

    def test_recent_squawks_newest_first_and_limited(self):
        flights = [
            make_flight(id=f"f{day}", date=f"2024-05-{day:02d}", squawks=f"Squawk {day}")
            for day in range(1, 9)
        ]

        summary = StatisticsService.summarize_flights(flights, recent_squawk_limit=3)

        assert [item['id'] for item in summary.recent_squawks] == ['f8', 'f7', 'f6']

    def test_empty(self):
        summary = StatisticsService.summarize_flights([])

        assert summary.total_flights == 0
        assert summary.recent_squawks == []


class TestRouteAnalytics:
    """Tests for filtered route analytics."""

    @pytest.fixture
    def flights(self):
        return [
            make_flight('A', 1.0, id='f1', date='2024-05-03'),
            make_flight('A', 2.0, id='f2', date='2024-06-01', pilot_id='p2'),
            make_flight('B', 1.5, id='f3', date='2023-05-10', aircraft_id='a2'),
            make_flight('B', 1.5, id='f4', date='not a date'),
        ]

    @pytest.mark.parametrize('filters,expected', [
        ({}, ['f1', 'f2', 'f3', 'f4']),
        ({'month': 5}, ['f1', 'f3']),
        ({'year': 2024}, ['f1', 'f2']),
        ({'month': 5, 'year': 2024}, ['f1']),
        ({'aircraft_id': 'a1'}, ['f1', 'f2', 'f4']),
        ({'pilot_id': 'p1', 'year': '2024'}, ['f1']),
    ])
    def test_filter_flights(self, flights, filters, expected):
        selected = StatisticsService.filter_flights(flights, **filters)

        assert [flight['id'] for flight in selected] == expected

    def test_available_years_newest_first(self, flights):
        flights.append(make_flight(date=date(2022, 1, 1)))
        flights.append(make_flight(date=None))

        assert StatisticsService.available_years(flights) == [2024, 2023, 2022]

    def test_groups_filtered_flights(self, flights):
        rows = StatisticsService.route_analytics(flights, year=2024)

        assert [(row.route, row.flight_count, row.average_time) for row in rows] == [('A', 2, 1.5)]
        assert rows[0].target_time is None
        assert rows[0].difference is None
        assert rows[0].percent_diff is None

    def test_tach_delta_when_no_hobbs(self):
        flights = [
            make_flight('A', 0, tach_start=100.0, tach_end=101.5),
            make_flight('A', None, tach_start=200.0, tach_end=201.3),
            make_flight('B', 0, tach_start=101.5, tach_end=100.0),
        ]

        rows = StatisticsService.route_analytics(flights)

        assert [(row.route, row.average_time) for row in rows] == [('A', 1.4), ('B', 0.0)]

    def test_missing_route_is_unknown(self):
        rows = StatisticsService.route_analytics([make_flight(None, 1.0)])

        assert rows[0].route == UNKNOWN_ROUTE

    def test_target_follows_aircraft_filter(self):
        flights = [
            make_flight('A', 1.2, date='2024-05-03'),
            make_flight('A', 1.8, date='2024-05-04', aircraft_id='a2'),
        ]
        targets = [
            make_target(1.0, route='A'),
            make_target(1.1, route='A', aircraft_id='a1'),
            make_target(2.0, route='A', aircraft_id='a2'),
        ]

        first = StatisticsService.route_analytics(flights, targets, aircraft_id='a1')[0]
        second = StatisticsService.route_analytics(flights, targets, aircraft_id='a2')[0]

        assert (first.target_time, first.difference, first.percent_diff) == (1.1, 0.1, 9.1)
        assert (second.target_time, second.difference, second.percent_diff) == (2.0, -0.2, -10.0)

    def test_open_filter_accepts_qualified_target(self):
        flights = [make_flight('A', 1.0, date='2024-05-03')]
        targets = [
            make_target(1.0, route='A'),
            make_target(0.8, route='A', month=5),
        ]

        rows = StatisticsService.route_analytics(flights, targets)

        assert rows[0].target_time == 0.8

    def test_mismatched_filter_falls_back_to_general_target(self):
        flights = [make_flight('A', 1.0, date='2024-06-03')]
        targets = [
            make_target(1.0, route='A'),
            make_target(0.8, route='A', month=5),
        ]

        rows = StatisticsService.route_analytics(flights, targets, month=6)

        assert rows[0].target_time == 1.0
        assert rows[0].difference == 0.0
        assert rows[0].percent_diff == 0.0

    def test_zero_target_has_no_percent(self):
        rows = StatisticsService.route_analytics(
            [make_flight('A', 1.25)], [make_target(0, route='A')]
        )

        assert rows[0].target_time == 0.0
        assert rows[0].difference == 1.25
        assert rows[0].percent_diff is None

    @pytest.mark.parametrize('descending,expected', [
        (False, ['C', 'A', 'B']),
        (True, ['A', 'C', 'B']),
    ])
    def test_sort_keeps_missing_values_last(self, descending, expected):
        flights = [
            make_flight('A', 1.5),
            make_flight('B', 1.0),
            make_flight('C', 0.5),
        ]
        targets = [make_target(1.0, route='A'), make_target(1.0, route='C')]

        rows = StatisticsService.route_analytics(
            flights, targets, sort_field='percent_diff', descending=descending
        )

        assert [row.route for row in rows] == expected

    def test_sorts_by_route_by_default(self):
        flights = [make_flight('C', 1.0), make_flight('A', 1.0), make_flight('B', 1.0)]

        rows = StatisticsService.route_analytics(flights)

        assert [row.route for row in rows] == ['A', 'B', 'C']

    @pytest.mark.parametrize('hobbs,expected', [
        (1.005, 1.0),
        (1.125, 1.13),
        (2.675, 2.67),
    ])
    def test_average_rounding(self, hobbs, expected):
        rows = StatisticsService.route_analytics([make_flight('A', hobbs)])

        assert rows[0].average_time == expected
