"""
FlightRecord model - one flight as published by the Schiphol API.

Records are immutable once parsed. A cache refresh replaces the whole
list of records for a query; individual records are never patched.

Design notes:
- Parsing is tolerant: missing or wrongly typed fields fall back to
  empty values so a single malformed flight never breaks a page
- Times are kept as timezone-aware datetimes (the API publishes
  Amsterdam local time with an explicit offset)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from gateboard.timeutils import AMSTERDAM

# Flight numbers in this range are bus/train services sold under the
# KLM flight-number namespace (e.g. KL9955), not passenger flights.
GROUND_TRANSPORT_MIN = 9000
GROUND_TRANSPORT_MAX = 9999


def parse_api_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp from the API, or None if absent/invalid.

    Timestamps without an offset are taken as Amsterdam local time.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=AMSTERDAM)
    return parsed


def _as_flight_number(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ''


def _as_codes(value: Any) -> Tuple[str, ...]:
    """List of codes from the API; anything else (or non-string items) is dropped."""
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(v for v in value if isinstance(v, str))


@dataclass(frozen=True)
class FlightRecord:
    """
    A single departing or arriving flight.

    Mirrors the fields of the Schiphol v4 flight object that the
    dashboard uses. Tuples are used for list-valued fields so the
    record stays hashable and cannot be mutated after caching.
    """
    flight_number: int
    flight_name: str
    flight_direction: str = 'D'

    # Schedule
    schedule_datetime: Optional[datetime] = None
    schedule_date: str = ''
    estimated_off_block: Optional[datetime] = None
    actual_off_block: Optional[datetime] = None

    # Location
    gate: str = ''
    pier: str = ''
    destinations: Tuple[str, ...] = field(default_factory=tuple)

    # Status codes (SCH, DEL, BRD, GCH, ...)
    flight_states: Tuple[str, ...] = field(default_factory=tuple)

    aircraft_type: str = ''
    aircraft_subtype: str = ''  # iataSub, distinguishes variants such as 332 vs 333

    # Operating carrier (differs from flight_name for codeshares)
    main_flight: Optional[str] = None
    prefix_iata: Optional[str] = None
    prefix_icao: Optional[str] = None

    last_updated_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'FlightRecord':
        """
        Build a record from a raw API flight object.

        Accepts both the nested v4 layout (publicFlightState.flightStates,
        route.destinations, aircraftType.iataMain) and flattened variants.
        Fields of the wrong type are treated as missing.
        """
        schedule_raw = _as_str(data.get('scheduleDateTime'))
        schedule_date = _as_str(data.get('scheduleDate')) or schedule_raw.split('T')[0]

        estimated_raw = (
            _as_str(data.get('publicEstimatedOffBlockTime'))
            or _as_str(data.get('estimatedOffBlockTime'))
            or schedule_raw
        )

        state_block = _as_dict(data.get('publicFlightState'))
        flight_states = _as_codes(state_block.get('flightStates')) or _as_codes(data.get('flightStates'))

        route = _as_dict(data.get('route'))
        destinations = _as_codes(route.get('destinations')) or _as_codes(data.get('destinations'))

        aircraft = data.get('aircraftType')
        if isinstance(aircraft, str):
            aircraft_type, aircraft_subtype = aircraft, ''
        else:
            aircraft = _as_dict(aircraft)
            aircraft_subtype = _as_str(aircraft.get('iataSub'))
            aircraft_type = _as_str(aircraft.get('iataMain')) or aircraft_subtype

        return cls(
            flight_number=_as_flight_number(data.get('flightNumber')),
            flight_name=_as_str(data.get('flightName')),
            flight_direction=_as_str(data.get('flightDirection')) or 'D',
            schedule_datetime=parse_api_datetime(schedule_raw),
            schedule_date=schedule_date,
            estimated_off_block=parse_api_datetime(estimated_raw),
            actual_off_block=parse_api_datetime(data.get('actualOffBlockTime')),
            gate=_as_str(data.get('gate')),
            pier=_as_str(data.get('pier')),
            destinations=destinations,
            flight_states=flight_states,
            aircraft_type=aircraft_type,
            aircraft_subtype=aircraft_subtype,
            main_flight=_as_str(data.get('mainFlight')) or None,
            prefix_iata=_as_str(data.get('prefixIATA')) or None,
            prefix_icao=_as_str(data.get('prefixICAO')) or None,
            last_updated_at=parse_api_datetime(data.get('lastUpdatedAt') or data.get('updatedAt')),
        )

    @property
    def destination(self) -> Optional[str]:
        return self.destinations[0] if self.destinations else None

    @property
    def operating_flight(self) -> str:
        """Operating carrier flight designator (falls back to the flight name)."""
        return self.main_flight or self.flight_name

    @property
    def is_ground_transport(self) -> bool:
        return is_ground_transport(self.flight_number)

    @property
    def aircraft_variant(self) -> str:
        return self.aircraft_subtype or self.aircraft_type

    @property
    def off_block(self) -> Optional[datetime]:
        """Actual off-block time once departed, the estimate before that."""
        return self.actual_off_block or self.estimated_off_block

    @property
    def delay_minutes(self) -> int:
        """Off-block minus scheduled time in whole minutes (negative if early)."""
        if not self.schedule_datetime or not self.off_block:
            return 0
        delta = self.off_block - self.schedule_datetime
        return round(delta.total_seconds() / 60)

    def has_state(self, code: str) -> bool:
        return code in self.flight_states

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'flight_number': self.flight_number,
            'flight_name': self.flight_name,
            'flight_direction': self.flight_direction,
            'schedule': {
                'datetime': self.schedule_datetime.isoformat() if self.schedule_datetime else None,
                'date': self.schedule_date,
                'estimated_off_block': self.estimated_off_block.isoformat() if self.estimated_off_block else None,
                'actual_off_block': self.actual_off_block.isoformat() if self.actual_off_block else None,
            },
            'gate': self.gate or None,
            'pier': self.pier or None,
            'destinations': list(self.destinations),
            'flight_states': list(self.flight_states),
            'aircraft_type': self.aircraft_type or None,
            'aircraft_subtype': self.aircraft_subtype or None,
            'operator': {
                'main_flight': self.main_flight,
                'prefix_iata': self.prefix_iata,
                'prefix_icao': self.prefix_icao,
            },
            'last_updated_at': self.last_updated_at.isoformat() if self.last_updated_at else None,
        }


def is_ground_transport(flight_number: int) -> bool:
    """True for flight numbers in the inclusive bus/train range [9000, 9999]."""
    return GROUND_TRANSPORT_MIN <= flight_number <= GROUND_TRANSPORT_MAX


def exclude_ground_transport(records: List[FlightRecord]) -> List[FlightRecord]:
    """Drop ground-transport services, keeping order of everything else."""
    return [r for r in records if not is_ground_transport(r.flight_number)]
