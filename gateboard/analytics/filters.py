"""
Post-cache flight filters.

The cache stores every passenger flight the API returned for a query;
dashboard views narrow that list further with these pure functions.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from gateboard.models import FlightRecord

logger = logging.getLogger(__name__)

# States that take a flight out of today's operation (cancelled, moved to tomorrow)
NON_OPERATIONAL_STATES = frozenset({'CNX', 'TOM'})

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def is_klm_operated(flight: FlightRecord) -> bool:
    """True if KLM operates the flight itself (codeshares on other carriers excluded)."""
    return flight.operating_flight.startswith('KL')


def is_operational(flight: FlightRecord) -> bool:
    """
    True unless every published state is non-operational.

    Flights without any published state are kept.
    """
    if not flight.flight_states:
        return True
    return any(state not in NON_OPERATIONAL_STATES for state in flight.flight_states)


def filter_flights(
    flights: Iterable[FlightRecord],
    schedule_date: Optional[str] = None,
    klm_operated_only: bool = False,
    operational_only: bool = False,
) -> List[FlightRecord]:
    """
    Narrow a flight list.

    Args:
        schedule_date: keep flights scheduled on this YYYY-MM-DD date
        klm_operated_only: drop codeshares operated by other carriers
        operational_only: drop flights whose states are all non-operational
    """
    result = list(flights)

    if klm_operated_only:
        result = [f for f in result if is_klm_operated(f)]

    if schedule_date:
        result = [f for f in result if _schedule_date(f) == schedule_date]
        logger.debug(f'After date filtering ({schedule_date}): {len(result)} flights remain')

    if operational_only:
        result = [f for f in result if is_operational(f)]

    return result


def remove_duplicate_flights(flights: Iterable[FlightRecord]) -> List[FlightRecord]:
    """Keep one record per flight number, the most recently updated one."""
    latest = {}
    for flight in flights:
        existing = latest.get(flight.flight_number)
        if existing is None or _updated(flight) > _updated(existing):
            latest[flight.flight_number] = flight
    return list(latest.values())


def _schedule_date(flight: FlightRecord) -> str:
    if flight.schedule_date:
        return flight.schedule_date
    if flight.schedule_datetime:
        return flight.schedule_datetime.date().isoformat()
    return ''


def _updated(flight: FlightRecord) -> datetime:
    ts = flight.last_updated_at
    if ts is None:
        return _EPOCH
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts
