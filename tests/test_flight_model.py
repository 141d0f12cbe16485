"""
Tests for FlightRecord parsing and the ground-transport rule.

Tests cover:
- Parsing nested and flattened API flight objects
- Time zone handling of API timestamps
- Delay calculation
- Ground-transport range boundaries
"""

from datetime import datetime, timedelta

import pytest

from gateboard.models import (
    FlightRecord,
    exclude_ground_transport,
    is_ground_transport,
    parse_api_datetime,
)
from gateboard.timeutils import AMSTERDAM
from tests.conftest import make_flight


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def api_flight() -> dict:
    """A departure as returned by the v4 flights endpoint."""
    return {
        'flightName': 'KL1001',
        'flightNumber': 1001,
        'flightDirection': 'D',
        'scheduleDate': '2026-10-18',
        'scheduleDateTime': '2026-10-18T10:00:00.000+02:00',
        'publicEstimatedOffBlockTime': '2026-10-18T10:25:00.000+02:00',
        'gate': 'D7',
        'pier': 'D',
        'route': {'destinations': ['LHR']},
        'publicFlightState': {'flightStates': ['DEL', 'GCH']},
        'aircraftType': {'iataMain': '73H', 'iataSub': '73H'},
        'mainFlight': 'KL1001',
        'prefixIATA': 'KL',
        'prefixICAO': 'KLM',
        'lastUpdatedAt': '2026-10-18T08:12:00.000+02:00',
    }


# =============================================================================
# PARSING
# =============================================================================


class TestFromApi:
    """Tests for FlightRecord.from_api."""

    def test_nested_layout(self, api_flight):
        record = FlightRecord.from_api(api_flight)

        assert record.flight_number == 1001
        assert record.flight_name == 'KL1001'
        assert record.schedule_date == '2026-10-18'
        assert record.gate == 'D7'
        assert record.destination == 'LHR'
        assert record.flight_states == ('DEL', 'GCH')
        assert record.aircraft_type == '73H'
        assert record.prefix_icao == 'KLM'
        assert record.schedule_datetime.utcoffset() == timedelta(hours=2)

    def test_flat_layout(self):
        record = FlightRecord.from_api({
            'flightName': 'KL1002',
            'flightNumber': '1002',
            'scheduleDateTime': '2026-10-18T11:00:00+02:00',
            'flightStates': ['SCH'],
            'destinations': ['CDG'],
            'aircraftType': '295',
        })

        assert record.flight_number == 1002
        assert record.schedule_date == '2026-10-18'
        assert record.flight_states == ('SCH',)
        assert record.destinations == ('CDG',)
        assert record.aircraft_type == '295'

    def test_missing_fields_do_not_raise(self):
        record = FlightRecord.from_api({})

        assert record.flight_number == 0
        assert record.flight_name == ''
        assert record.schedule_datetime is None
        assert record.destination is None
        assert record.delay_minutes == 0

    def test_estimate_falls_back_to_schedule(self, api_flight):
        del api_flight['publicEstimatedOffBlockTime']

        record = FlightRecord.from_api(api_flight)

        assert record.estimated_off_block == record.schedule_datetime
        assert record.delay_minutes == 0

    def test_operating_flight_for_codeshare(self, api_flight):
        api_flight['flightName'] = 'KL1234'
        api_flight['mainFlight'] = 'DL9'

        record = FlightRecord.from_api(api_flight)

        assert record.operating_flight == 'DL9'

    def test_records_are_immutable(self, api_flight):
        record = FlightRecord.from_api(api_flight)

        with pytest.raises(AttributeError):
            record.gate = 'E1'

    @pytest.mark.parametrize('field, value', [
        ('scheduleDateTime', 20261018),
        ('route', 'LHR'),
        ('publicFlightState', ['DEP']),
        ('aircraftType', ['73H']),
        ('gate', 7),
    ])
    def test_wrongly_typed_field_is_treated_as_missing(self, api_flight, field, value):
        api_flight[field] = value

        record = FlightRecord.from_api(api_flight)

        assert record.flight_number == 1001
        assert record.flight_name == 'KL1001'

    def test_numeric_schedule_keeps_schedule_date(self, api_flight):
        api_flight['scheduleDateTime'] = 20261018
        del api_flight['publicEstimatedOffBlockTime']

        record = FlightRecord.from_api(api_flight)

        assert record.schedule_datetime is None
        assert record.estimated_off_block is None
        assert record.schedule_date == '2026-10-18'

    def test_non_string_codes_dropped(self, api_flight):
        api_flight['route'] = {'destinations': ['LHR', None, 5]}

        record = FlightRecord.from_api(api_flight)

        assert record.destinations == ('LHR',)

    def test_aircraft_subtype(self, api_flight):
        api_flight['aircraftType'] = {'iataMain': '330', 'iataSub': '333'}

        record = FlightRecord.from_api(api_flight)

        assert record.aircraft_type == '330'
        assert record.aircraft_subtype == '333'
        assert record.aircraft_variant == '333'

    def test_actual_off_block_overrides_estimate(self, api_flight):
        api_flight['actualOffBlockTime'] = '2026-10-18T10:40:00.000+02:00'

        record = FlightRecord.from_api(api_flight)

        assert record.delay_minutes == 40


class TestParseApiDatetime:
    """Tests for parse_api_datetime."""

    def test_zulu_suffix(self):
        parsed = parse_api_datetime('2026-10-18T08:00:00Z')
        assert parsed.utcoffset() == timedelta(0)

    def test_naive_is_amsterdam(self):
        parsed = parse_api_datetime('2026-10-18T10:00:00')
        assert parsed.tzinfo is AMSTERDAM

    @pytest.mark.parametrize('value', [None, '', 'not a date', 42])
    def test_invalid_returns_none(self, value):
        assert parse_api_datetime(value) is None


class TestDelayMinutes:
    """Tests for FlightRecord.delay_minutes."""

    def test_late_departure(self):
        schedule = datetime(2026, 10, 18, 10, 0, tzinfo=AMSTERDAM)
        flight = make_flight(schedule=schedule, estimated=schedule + timedelta(minutes=47))
        assert flight.delay_minutes == 47

    def test_early_departure_is_negative(self):
        schedule = datetime(2026, 10, 18, 10, 0, tzinfo=AMSTERDAM)
        flight = make_flight(schedule=schedule, estimated=schedule - timedelta(minutes=5))
        assert flight.delay_minutes == -5


# =============================================================================
# GROUND TRANSPORT
# =============================================================================


class TestGroundTransport:
    """Flight numbers 9000-9999 inclusive are bus/train services."""

    @pytest.mark.parametrize('number, expected', [
        (8999, False),
        (9000, True),
        (9955, True),
        (9999, True),
        (10000, False),
        (10001, False),
        (1001, False),
    ])
    def test_range_boundaries(self, number, expected):
        assert is_ground_transport(number) is expected

    def test_exclude_keeps_order(self):
        flights = [make_flight(1001), make_flight(9955), make_flight(10001), make_flight(643)]

        kept = exclude_ground_transport(flights)

        assert [f.flight_number for f in kept] == [1001, 10001, 643]

    def test_record_property(self):
        assert make_flight(9000).is_ground_transport
        assert not make_flight(8999).is_ground_transport
