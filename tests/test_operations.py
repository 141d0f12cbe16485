"""
Tests for the gate, route and aircraft analytics.

Tests cover:
- Gate and pier grouping, status bands and utilisation
- European destination counts and summary
- Per-route delay statistics
- Per-aircraft-type delay performance and fleet summary
"""

from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from gateboard.analytics import (
    compute_aircraft_performance,
    compute_destinations,
    compute_gate_usage,
    compute_route_delays,
)
from gateboard.analytics.operations import GateUsage, PierUsage
from gateboard.timeutils import AMSTERDAM
from tests.conftest import make_flight


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 10, 18, hour, minute, tzinfo=AMSTERDAM)


def flight(number: int, minutes_late: int = 0, hour: int = 10, **fields):
    """A departure delayed by minutes_late, with any FlightRecord field overridden."""
    schedule = at(hour)
    base = make_flight(number, schedule=schedule, estimated=schedule + timedelta(minutes=minutes_late))
    return replace(base, **fields)


# =============================================================================
# GATES AND PIERS
# =============================================================================


class TestGateUsage:
    """Tests for compute_gate_usage."""

    def test_groups_busiest_first(self):
        flights = [
            flight(1001, gate='E2', pier='E'),
            flight(1002, gate='D7', pier='D', hour=12),
            flight(1003, gate='D7', pier='D', hour=9),
        ]

        summary = compute_gate_usage(flights)

        assert [g.gate for g in summary.gates] == ['D7', 'E2']
        assert summary.gates[0].flights == 2
        assert summary.gates[0].next_flight.flight_number == 1003
        assert [p.pier for p in summary.piers] == ['D', 'E']
        assert summary.total_flights == 3

    def test_missing_gate_and_pier_are_unknown(self):
        summary = compute_gate_usage([flight(1001, gate='', pier='')])

        assert summary.gates[0].gate == 'Unknown'
        assert summary.gates[0].pier == 'Unknown'
        assert summary.piers[0].pier == 'Unknown'

    @pytest.mark.parametrize('count, status', [
        (5, 'Available'),
        (6, 'Moderate'),
        (10, 'Moderate'),
        (11, 'Busy'),
    ])
    def test_gate_status(self, count, status):
        assert GateUsage(gate='D7', pier='D', flights=count).status == status

    @pytest.mark.parametrize('count, utilization, status', [
        (4, 20.0, 'Low'),
        (12, 60.0, 'Low'),
        (13, 65.0, 'Medium'),
        (17, 85.0, 'High'),
        (30, 100.0, 'High'),
    ])
    def test_pier_utilization(self, count, utilization, status):
        pier = PierUsage(pier='D', flights=count)

        assert pier.utilization == utilization
        assert pier.status == status

    def test_summary_dict(self):
        flights = [flight(n, gate='D7', pier='D') for n in range(1001, 1011)]
        flights += [flight(2001, gate='B3', pier='B')]

        data = compute_gate_usage(flights).to_dict()

        assert data['summary'] == {
            'total_gates': 2,
            'total_piers': 2,
            'total_flights': 11,
            'average_utilization': 27.5,
        }
        assert data['gates'][0]['next_flight'] == 'KL1001 (10:00)'

    def test_empty(self):
        data = compute_gate_usage([]).to_dict()

        assert data['summary']['total_gates'] == 0
        assert data['summary']['average_utilization'] == 0.0
        assert data['gates'] == []


# =============================================================================
# ROUTES
# =============================================================================


class TestDestinations:
    """Tests for compute_destinations."""

    def test_counts_european_destinations_only(self):
        flights = [
            flight(1001, destinations=('CDG',)),
            flight(1002, destinations=('CDG',)),
            flight(1003, destinations=('LHR',)),
            flight(1004, destinations=('JFK',)),
            flight(1005, destinations=()),
        ]

        summary = compute_destinations(flights)

        assert [(d.code, d.flights) for d in summary.destinations] == [('CDG', 2), ('LHR', 1)]
        assert summary.total_flights == 3

    def test_first_destination_of_multi_stop_route(self):
        summary = compute_destinations([flight(1001, destinations=('BGO', 'SVG'))])

        assert summary.destinations[0].code == 'BGO'

    def test_summary(self):
        flights = [
            flight(1001, destinations=('LHR',)),
            flight(1002, destinations=('LHR',)),
            flight(1003, destinations=('MAN',)),
            flight(1004, destinations=('CDG',)),
        ]

        data = compute_destinations(flights).to_dict()

        assert data['summary'] == {
            'active_destinations': 3,
            'total_flights': 4,
            'top_country': 'United Kingdom',
            'average_flights_per_destination': 1,
            'busiest_route': 'LHR',
        }

    def test_top_five(self):
        codes = ['LHR', 'CDG', 'FRA', 'MAD', 'FCO', 'CPH']
        flights = [flight(1000 + i, destinations=(code,)) for i, code in enumerate(codes)]

        data = compute_destinations(flights).to_dict()

        assert data['summary']['active_destinations'] == 6
        assert len(data['destinations']) == 5

    def test_empty(self):
        data = compute_destinations([]).to_dict()

        assert data['summary']['top_country'] is None
        assert data['summary']['busiest_route'] is None
        assert data['destinations'] == []


class TestRouteDelays:
    """Tests for compute_route_delays."""

    @pytest.fixture
    def flights(self):
        return [
            flight(1001, 0, hour=7, destinations=('LHR',), flight_states=('DEP',)),
            flight(1002, 10, hour=9, destinations=('LHR',)),
            flight(1003, 40, hour=12, destinations=('LHR',)),
            flight(1004, -5, hour=15, destinations=('LHR',), flight_states=('DEP',)),
            flight(1005, 20, destinations=('CDG',)),
        ]

    def test_statistics(self, flights):
        routes = compute_route_delays(flights)
        lhr = routes[0]

        assert [r.destination for r in routes] == ['LHR', 'CDG']
        assert lhr.name == 'London Heathrow'
        assert lhr.total_flights == 4
        assert lhr.departed_flights == 2
        assert lhr.on_time_flights == 2
        assert lhr.delayed_flights == 2
        assert lhr.average_delay == 12.5
        assert lhr.max_delay == 40
        assert lhr.median_delay == 5
        assert lhr.percent_delayed_over_15 == 25.0
        assert lhr.earliest_departure == at(7)
        assert lhr.latest_departure == at(15)
        assert lhr.flight_names == ['KL1001', 'KL1002', 'KL1003', 'KL1004']

    def test_to_dict(self, flights):
        data = compute_route_delays(flights)[1].to_dict()

        assert data['destination'] == 'CDG'
        assert data['on_time_percentage'] == 0.0
        assert data['percent_delayed_over_15'] == 100.0
        assert data['earliest_departure'] == at(10).isoformat()

    def test_top_routes(self):
        codes = ['LHR', 'CDG', 'FRA', 'MAD']
        flights = [flight(1000 + i, destinations=(code,)) for i, code in enumerate(codes)]

        assert len(compute_route_delays(flights, top=2)) == 2

    def test_empty(self):
        assert compute_route_delays([]) == []


# =============================================================================
# AIRCRAFT
# =============================================================================


class TestAircraftPerformance:
    """Tests for compute_aircraft_performance."""

    @pytest.fixture
    def flights(self):
        return [
            flight(1001, 0, aircraft_type='73H'),
            flight(1002, 10, aircraft_type='73H', gate='D7', pier='D'),
            flight(1003, 20, aircraft_type='73H', gate='D9', pier='D'),
            flight(1004, 40, aircraft_type='73H', flight_states=('CNX',)),
            flight(601, 30, aircraft_type='330', aircraft_subtype='333', gate='E18', pier='E'),
            flight(1005, 0, aircraft_type=''),
        ]

    def test_groups_by_variant(self, flights):
        fleet = compute_aircraft_performance(flights)

        assert [a.aircraft_type for a in fleet.aircraft] == ['73H', '333', 'Unknown']

    def test_type_statistics(self, flights):
        boeing = compute_aircraft_performance(flights).aircraft[0]

        assert boeing.flights == 4
        assert boeing.average_delay == 17.5
        assert boeing.min_delay == 0
        assert boeing.max_delay == 40
        assert boeing.on_time_flights == 1
        assert boeing.delayed_flights == 3
        assert boeing.on_time_percentage == 25.0
        assert (boeing.slight_delays, boeing.moderate_delays, boeing.significant_delays) == (1, 1, 1)
        assert boeing.gates == ['D7', 'D9']
        assert boeing.piers == ['D']
        assert boeing.flight_states == ['SCH', 'CNX']
        assert boeing.manufacturer == 'Boeing'
        assert boeing.seats == 126
        assert boeing.rating == 'Poor'

    def test_unknown_type_has_no_reference_data(self, flights):
        unknown = compute_aircraft_performance(flights).aircraft[-1]

        assert unknown.manufacturer == 'Unknown'
        assert unknown.seats is None
        assert unknown.rating == 'Excellent'

    @pytest.mark.parametrize('minutes, rating', [
        (4, 'Excellent'),
        (5, 'Good'),
        (10, 'Fair'),
        (15, 'Poor'),
    ])
    def test_rating_bands(self, minutes, rating):
        fleet = compute_aircraft_performance([flight(1001, minutes)])

        assert fleet.aircraft[0].rating == rating

    def test_summary(self, flights):
        data = compute_aircraft_performance(flights).to_dict()

        assert data['summary'] == {
            'aircraft_types': 3,
            'best_performer': 'Unknown',
            'best_performer_delay': 0.0,
            'highest_delay': '333',
            'highest_delay_value': 30.0,
            'fleet_average_delay': 16.7,
        }
        assert data['aircraft'][1]['delay_distribution'] == {
            'on_time': 0,
            'slight': 0,
            'moderate': 1,
            'significant': 0,
        }

    def test_early_departures_count_as_on_time(self):
        fleet = compute_aircraft_performance([flight(1001, -10)])

        assert fleet.aircraft[0].on_time_flights == 1
        assert fleet.aircraft[0].min_delay == 0

    def test_empty(self):
        data = compute_aircraft_performance([]).to_dict()

        assert data['summary']['aircraft_types'] == 0
        assert data['summary']['best_performer'] is None
        assert data['aircraft'] == []
