"""
Tests for dashboard KPIs.

Tests cover:
- Delay statistics and thresholds
- Hourly breakdown and peak hour
- Gate change detection, urgency and ordering
"""

from datetime import datetime, timedelta

import pytest

from gateboard.analytics import (
    compute_delay_kpis,
    find_gate_changes,
    summarize_gate_changes,
)
from gateboard.timeutils import AMSTERDAM
from tests.conftest import make_flight


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 10, 18, hour, minute, tzinfo=AMSTERDAM)


def delayed(number: int, schedule: datetime, minutes: int, **kwargs):
    return make_flight(number, schedule=schedule, estimated=schedule + timedelta(minutes=minutes), **kwargs)


# =============================================================================
# DELAY KPIS
# =============================================================================


class TestDelayKpis:
    """Tests for compute_delay_kpis."""

    @pytest.fixture
    def flights(self):
        return [
            delayed(1001, at(8, 0), 0),
            delayed(1002, at(8, 30), 20),
            delayed(1003, at(9, 10), 40),
            delayed(1004, at(9, 20), -5),
        ]

    def test_totals(self, flights):
        kpis = compute_delay_kpis(flights)

        assert kpis.total_flights == 4
        assert kpis.delayed_flights == 2
        assert kpis.total_delay_minutes == 60
        assert kpis.average_delay == 15
        assert kpis.median_delay == 10
        assert kpis.p90_delay == pytest.approx(34)
        assert kpis.flights_over_30_min == 1
        assert kpis.flights_over_60_min == 0

    def test_early_departures_do_not_offset(self):
        kpis = compute_delay_kpis([delayed(1001, at(8), 30), delayed(1002, at(8), -30)])

        assert kpis.total_delay_minutes == 30

    def test_hourly_breakdown(self, flights):
        kpis = compute_delay_kpis(flights)

        assert [(h.hour, h.flights, h.average_delay, h.max_delay) for h in kpis.hourly] == [
            (8, 2, 10, 20),
            (9, 2, 20, 40),
        ]
        assert kpis.peak_hour.label == '09:00-10:00'
        assert kpis.high_variance_hours == 1

    def test_peak_tie_goes_to_earliest_hour(self):
        kpis = compute_delay_kpis([delayed(1001, at(14), 25), delayed(1002, at(7), 25)])

        assert kpis.peak_hour.hour == 7

    def test_no_delays_has_no_peak(self):
        kpis = compute_delay_kpis([delayed(1001, at(8), 0)])

        assert kpis.peak_hour is None
        assert kpis.to_dict()['peak_delay_hour'] is None

    def test_empty(self):
        kpis = compute_delay_kpis([])

        assert kpis.total_flights == 0
        assert kpis.average_delay == 0
        assert kpis.hourly == []

    def test_to_dict(self, flights):
        data = compute_delay_kpis(flights).to_dict()

        assert data['total_flights'] == 4
        assert data['average_delay'] == 15.0
        assert data['peak_delay_hour'] == '09:00-10:00'
        assert data['peak_delay_value'] == 20.0
        assert data['hourly'][0]['label'] == '08:00-09:00'


# =============================================================================
# GATE CHANGES
# =============================================================================


class TestGateChanges:
    """Tests for find_gate_changes and summarize_gate_changes."""

    @pytest.fixture
    def now(self):
        return at(10, 0)

    @pytest.fixture
    def flights(self):
        return [
            delayed(1001, at(12, 0), 0, states=('GCH', 'DEL')),
            delayed(1002, at(10, 30), 0, states=('GCH',)),
            delayed(1003, at(10, 45), 0, states=('GCH',), gate=''),
            delayed(6004, at(10, 50), 0, states=('GCH',), main_flight='DL46'),
            delayed(1005, at(10, 55), 0, states=('BRD',)),
        ]

    def test_only_klm_operated_with_gate(self, flights, now):
        events = find_gate_changes(flights, now=now)

        assert [e.flight.flight_number for e in events] == [1002, 1001]

    def test_timing_and_flags(self, flights, now):
        soon, later = find_gate_changes(flights, now=now)

        assert soon.time_until_departure == 30
        assert soon.is_priority
        assert not soon.is_delayed

        assert later.time_until_departure == 120
        assert not later.is_priority
        assert later.is_delayed

    def test_delay_over_threshold_is_delayed(self, now):
        [event] = find_gate_changes([delayed(1001, at(11), 16, states=('GCH',))], now=now)

        assert event.is_delayed
        assert event.delay_minutes == 16

    def test_departed_is_not_priority(self, now):
        [event] = find_gate_changes([delayed(1001, at(9, 50), 0, states=('GCH',))], now=now)

        assert event.time_until_departure == -10
        assert not event.is_priority

    def test_summary(self, flights, now):
        summary = summarize_gate_changes(find_gate_changes(flights, now=now))

        assert summary == {'total': 2, 'urgent': 1, 'delayed': 1}

    def test_to_dict_readable_states(self, flights, now):
        data = find_gate_changes(flights, now=now)[1].to_dict()

        assert data['flight_number'] == '1001'
        assert data['current_gate'] == 'D7'
        assert data['destination'] == 'LHR'
        assert data['flight_states_readable'] == ['Gate Change', 'Delayed']
