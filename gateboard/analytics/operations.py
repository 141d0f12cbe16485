"""
Operational views over a day's departures using NumPy.

Three groupings of the same flight list:

1. Gates and piers: flights per gate and pier, with a utilisation
   estimate per pier
2. Routes: flights and delay statistics per European destination
3. Aircraft: delay performance per aircraft type (IATA sub type when
   published, main type otherwise)

Delays come from kpis.delay_minutes, so they are clamped at zero the
same way the dashboard KPIs are.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from gateboard.analytics.kpis import delay_minutes
from gateboard.analytics.reference import (
    Airport,
    aircraft_manufacturer,
    aircraft_seats,
    european_airport,
)
from gateboard.models import FlightRecord
from gateboard.timeutils import AMSTERDAM

logger = logging.getLogger(__name__)

# A gate with more departures than these is Busy / Moderate
GATE_BUSY_FLIGHTS = 10
GATE_MODERATE_FLIGHTS = 5

# Departures per pier that count as 100% utilisation
PIER_CAPACITY_FLIGHTS = 20

# Delay above which a route flight counts toward percent_delayed_over_15
ROUTE_DELAY_THRESHOLD_MINUTES = 15

TOP_DESTINATIONS = 5
TOP_ROUTES = 15
MAX_LISTED_LOCATIONS = 5


def _group_by(
    flights: Sequence[FlightRecord],
    key: Callable[[FlightRecord], Optional[str]],
) -> Dict[str, List[FlightRecord]]:
    """Group flights by key, in first-seen order. Flights keyed None are dropped."""
    groups: Dict[str, List[FlightRecord]] = {}
    for f in flights:
        k = key(f)
        if k is not None:
            groups.setdefault(k, []).append(f)
    return groups


def _schedule_key(f: FlightRecord):
    return (f.schedule_datetime is None, f.schedule_datetime.timestamp() if f.schedule_datetime else 0)


def _unique(values) -> List[str]:
    return list(dict.fromkeys(v for v in values if v))


# -----------------------------------------------------------------------------
# Gates and piers
# -----------------------------------------------------------------------------

@dataclass
class GateUsage:
    """Departures from one gate."""
    gate: str
    pier: str
    flights: int
    next_flight: Optional[FlightRecord] = None

    @property
    def status(self) -> str:
        if self.flights > GATE_BUSY_FLIGHTS:
            return 'Busy'
        if self.flights > GATE_MODERATE_FLIGHTS:
            return 'Moderate'
        return 'Available'

    def to_dict(self) -> dict:
        nxt = self.next_flight
        label = None
        if nxt is not None:
            label = nxt.flight_name
            if nxt.schedule_datetime:
                label += f" ({nxt.schedule_datetime.astimezone(AMSTERDAM):%H:%M})"
        return {
            'gate': self.gate,
            'pier': self.pier,
            'flights': self.flights,
            'status': self.status,
            'next_flight': label,
        }


@dataclass
class PierUsage:
    """Departures from one pier and the resulting utilisation estimate."""
    pier: str
    flights: int

    @property
    def utilization(self) -> float:
        return min(100.0, self.flights * 100 / PIER_CAPACITY_FLIGHTS)

    @property
    def status(self) -> str:
        if self.utilization > 80:
            return 'High'
        if self.utilization > 60:
            return 'Medium'
        return 'Low'

    def to_dict(self) -> dict:
        return {
            'pier': self.pier,
            'flights': self.flights,
            'utilization': round(self.utilization, 1),
            'status': self.status,
        }


@dataclass
class GateUsageSummary:
    gates: List[GateUsage] = field(default_factory=list)
    piers: List[PierUsage] = field(default_factory=list)
    total_flights: int = 0

    @property
    def average_utilization(self) -> float:
        if not self.piers:
            return 0.0
        return float(np.mean([p.utilization for p in self.piers]))

    def to_dict(self) -> dict:
        return {
            'summary': {
                'total_gates': len(self.gates),
                'total_piers': len(self.piers),
                'total_flights': self.total_flights,
                'average_utilization': round(self.average_utilization, 1),
            },
            'piers': [p.to_dict() for p in self.piers],
            'gates': [g.to_dict() for g in self.gates],
        }


def compute_gate_usage(flights: Sequence[FlightRecord]) -> GateUsageSummary:
    """
    Departures per gate and per pier, busiest first.

    Flights without a gate or pier are grouped under 'Unknown'.
    """
    by_gate = _group_by(flights, lambda f: f.gate or 'Unknown')
    by_pier = _group_by(flights, lambda f: f.pier or 'Unknown')

    gates = [
        GateUsage(
            gate=gate,
            pier=group[0].pier or 'Unknown',
            flights=len(group),
            next_flight=min(group, key=_schedule_key),
        )
        for gate, group in by_gate.items()
    ]
    gates.sort(key=lambda g: -g.flights)

    piers = [PierUsage(pier=pier, flights=len(group)) for pier, group in by_pier.items()]
    piers.sort(key=lambda p: -p.flights)

    return GateUsageSummary(gates=gates, piers=piers, total_flights=len(flights))


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

def _european_destination(f: FlightRecord) -> Optional[str]:
    return f.destination if european_airport(f.destination) else None


@dataclass
class DestinationCount:
    code: str
    airport: Airport
    flights: int

    def to_dict(self) -> dict:
        return {
            'code': self.code,
            'name': self.airport.name,
            'country': self.airport.country,
            'flights': self.flights,
        }


@dataclass
class DestinationSummary:
    destinations: List[DestinationCount] = field(default_factory=list)

    @property
    def total_flights(self) -> int:
        return sum(d.flights for d in self.destinations)

    @property
    def top_country(self) -> Optional[str]:
        """Country with the most distinct destinations."""
        counts = Counter(d.airport.country for d in self.destinations)
        return counts.most_common(1)[0][0] if counts else None

    def to_dict(self, top: int = TOP_DESTINATIONS) -> dict:
        n = len(self.destinations)
        return {
            'summary': {
                'active_destinations': n,
                'total_flights': self.total_flights,
                'top_country': self.top_country,
                'average_flights_per_destination': round(self.total_flights / n) if n else 0,
                'busiest_route': self.destinations[0].code if n else None,
            },
            'destinations': [d.to_dict() for d in self.destinations[:top]],
        }


def compute_destinations(flights: Sequence[FlightRecord]) -> DestinationSummary:
    """
    Departures per European destination, busiest first.

    Only the first destination of a multi-stop route counts, and
    destinations outside Europe are left out.
    """
    groups = _group_by(flights, _european_destination)
    destinations = [
        DestinationCount(code=code, airport=european_airport(code), flights=len(group))
        for code, group in groups.items()
    ]
    destinations.sort(key=lambda d: -d.flights)
    return DestinationSummary(destinations=destinations)


@dataclass
class RouteDelay:
    """Delay statistics for departures to one destination."""
    destination: str
    name: str
    total_flights: int
    departed_flights: int
    on_time_flights: int
    average_delay: float
    max_delay: float
    median_delay: float
    delayed_over_15: int
    earliest_departure: Optional[datetime] = None
    latest_departure: Optional[datetime] = None
    flight_names: List[str] = field(default_factory=list)

    @property
    def delayed_flights(self) -> int:
        return self.total_flights - self.on_time_flights

    @property
    def on_time_percentage(self) -> float:
        return self.on_time_flights / self.total_flights * 100 if self.total_flights else 0.0

    @property
    def percent_delayed_over_15(self) -> float:
        return self.delayed_over_15 / self.total_flights * 100 if self.total_flights else 0.0

    def to_dict(self) -> dict:
        return {
            'destination': self.destination,
            'destination_name': self.name,
            'total_flights': self.total_flights,
            'departed_flights': self.departed_flights,
            'on_time_flights': self.on_time_flights,
            'delayed_flights': self.delayed_flights,
            'average_delay': round(self.average_delay, 1),
            'max_delay': round(self.max_delay),
            'median_delay': round(self.median_delay, 1),
            'on_time_percentage': round(self.on_time_percentage, 1),
            'percent_delayed_over_15': round(self.percent_delayed_over_15, 1),
            'earliest_departure': self.earliest_departure.isoformat() if self.earliest_departure else None,
            'latest_departure': self.latest_departure.isoformat() if self.latest_departure else None,
            'flight_names': self.flight_names,
        }


def compute_route_delays(flights: Sequence[FlightRecord], top: int = TOP_ROUTES) -> List[RouteDelay]:
    """
    Delay statistics per European destination, top routes by volume.

    A flight is on time when its (clamped) delay is zero, and departed
    when its first published state is DEP.
    """
    routes = []

    for code, group in _group_by(flights, _european_destination).items():
        delays = delay_minutes(group)
        scheduled = sorted(f.schedule_datetime for f in group if f.schedule_datetime)

        routes.append(RouteDelay(
            destination=code,
            name=european_airport(code).name,
            total_flights=len(group),
            departed_flights=sum(1 for f in group if f.flight_states[:1] == ('DEP',)),
            on_time_flights=int(np.count_nonzero(delays == 0)),
            average_delay=float(delays.mean()),
            max_delay=float(delays.max()),
            median_delay=float(np.median(delays)),
            delayed_over_15=int(np.count_nonzero(delays > ROUTE_DELAY_THRESHOLD_MINUTES)),
            earliest_departure=scheduled[0] if scheduled else None,
            latest_departure=scheduled[-1] if scheduled else None,
            flight_names=_unique(f.flight_name for f in group),
        ))

    routes.sort(key=lambda r: -r.total_flights)
    return routes[:top]


# -----------------------------------------------------------------------------
# Aircraft
# -----------------------------------------------------------------------------

@dataclass
class AircraftPerformance:
    """Delay performance of one aircraft type."""
    aircraft_type: str
    flights: int
    average_delay: float
    min_delay: float
    max_delay: float
    on_time_flights: int
    slight_delays: int       # 1-15 minutes
    moderate_delays: int     # 16-30 minutes
    significant_delays: int  # over 30 minutes
    gates: List[str] = field(default_factory=list)
    piers: List[str] = field(default_factory=list)
    flight_states: List[str] = field(default_factory=list)
    last_updated: Optional[datetime] = None

    @property
    def manufacturer(self) -> str:
        return aircraft_manufacturer(self.aircraft_type)

    @property
    def seats(self) -> Optional[int]:
        return aircraft_seats(self.aircraft_type)

    @property
    def delayed_flights(self) -> int:
        return self.flights - self.on_time_flights

    @property
    def on_time_percentage(self) -> float:
        return self.on_time_flights / self.flights * 100 if self.flights else 0.0

    @property
    def rating(self) -> str:
        if self.average_delay < 5:
            return 'Excellent'
        if self.average_delay < 10:
            return 'Good'
        if self.average_delay < 15:
            return 'Fair'
        return 'Poor'

    def to_dict(self) -> dict:
        return {
            'type': self.aircraft_type,
            'manufacturer': self.manufacturer,
            'seats': self.seats,
            'flights': self.flights,
            'average_delay': round(self.average_delay, 1),
            'min_delay': round(self.min_delay, 1),
            'max_delay': round(self.max_delay, 1),
            'on_time_flights': self.on_time_flights,
            'delayed_flights': self.delayed_flights,
            'on_time_percentage': round(self.on_time_percentage, 1),
            'delay_distribution': {
                'on_time': self.on_time_flights,
                'slight': self.slight_delays,
                'moderate': self.moderate_delays,
                'significant': self.significant_delays,
            },
            'rating': self.rating,
            'gates': self.gates,
            'piers': self.piers,
            'flight_states': self.flight_states,
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
        }


@dataclass
class FleetPerformance:
    aircraft: List[AircraftPerformance] = field(default_factory=list)
    fleet_average_delay: float = 0.0

    @property
    def best_performer(self) -> Optional[AircraftPerformance]:
        return min(self.aircraft, key=lambda a: a.average_delay) if self.aircraft else None

    @property
    def highest_delay(self) -> Optional[AircraftPerformance]:
        return max(self.aircraft, key=lambda a: a.average_delay) if self.aircraft else None

    def to_dict(self) -> dict:
        best, worst = self.best_performer, self.highest_delay
        return {
            'summary': {
                'aircraft_types': len(self.aircraft),
                'best_performer': best.aircraft_type if best else None,
                'best_performer_delay': round(best.average_delay, 1) if best else None,
                'highest_delay': worst.aircraft_type if worst else None,
                'highest_delay_value': round(worst.average_delay, 1) if worst else None,
                'fleet_average_delay': round(self.fleet_average_delay, 1),
            },
            'aircraft': [a.to_dict() for a in self.aircraft],
        }


def compute_aircraft_performance(flights: Sequence[FlightRecord]) -> FleetPerformance:
    """
    Delay performance per aircraft type, most flown type first.

    Flights without an aircraft type are grouped under 'Unknown'.
    """
    aircraft = []

    for aircraft_type, group in _group_by(flights, lambda f: f.aircraft_variant or 'Unknown').items():
        delays = delay_minutes(group)
        updated = [f.last_updated_at for f in group if f.last_updated_at]

        aircraft.append(AircraftPerformance(
            aircraft_type=aircraft_type,
            flights=len(group),
            average_delay=float(delays.mean()),
            min_delay=float(delays.min()),
            max_delay=float(delays.max()),
            on_time_flights=int(np.count_nonzero(delays == 0)),
            slight_delays=int(np.count_nonzero((delays > 0) & (delays <= 15))),
            moderate_delays=int(np.count_nonzero((delays > 15) & (delays <= 30))),
            significant_delays=int(np.count_nonzero(delays > 30)),
            gates=_unique(f.gate for f in group)[:MAX_LISTED_LOCATIONS],
            piers=_unique(f.pier for f in group)[:MAX_LISTED_LOCATIONS],
            flight_states=_unique(f.flight_states[0] if f.flight_states else 'Unknown' for f in group),
            last_updated=max(updated) if updated else None,
        ))

    aircraft.sort(key=lambda a: -a.flights)
    logger.debug(f'Aircraft performance computed for {len(aircraft)} types')

    all_delays = delay_minutes(flights)
    return FleetPerformance(
        aircraft=aircraft,
        fleet_average_delay=float(all_delays.mean()) if all_delays.size else 0.0,
    )
