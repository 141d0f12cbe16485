"""
Dashboard KPIs computed from cached flight lists using NumPy.

Two families of indicators:

1. Delay KPIs: totals, averages and thresholds over departure delays,
   plus an hourly breakdown to find the worst hour of the day
2. Gate changes: flights currently flagged GCH, with urgency (departing
   within the hour) and delay annotations

Delay is estimated off-block minus scheduled time, clamped at zero so
early departures do not offset late ones.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import numpy as np

from gateboard.analytics.filters import is_klm_operated
from gateboard.models import FlightRecord
from gateboard.timeutils import local_hour, now_amsterdam

logger = logging.getLogger(__name__)

# Hours whose average delay exceeds this are counted as high variance
HIGH_VARIANCE_THRESHOLD_MINUTES = 15

# Gate changes for flights departing sooner than this are urgent
PRIORITY_WINDOW_MINUTES = 60

# A gate-change flight counts as delayed above this (or with a DEL state)
DELAYED_THRESHOLD_MINUTES = 15

FLIGHT_STATE_DESCRIPTIONS = {
    'SCH': 'Flight Scheduled',
    'DEL': 'Delayed',
    'WIL': 'Wait in Lounge',
    'GTO': 'Gate Open',
    'BRD': 'Boarding',
    'GCL': 'Gate Closing',
    'GTD': 'Gate Closed',
    'DEP': 'Departed',
    'CNX': 'Cancelled',
    'GCH': 'Gate Change',
    'TOM': 'Tomorrow',
}


@dataclass
class HourlyDelay:
    """Delay statistics for one scheduled hour (Amsterdam time)."""
    hour: int
    flights: int
    average_delay: float
    max_delay: float

    @property
    def label(self) -> str:
        return f'{self.hour:02d}:00-{(self.hour + 1) % 24:02d}:00'


@dataclass
class DelayKPIs:
    """Aggregate delay indicators for a set of flights."""
    total_flights: int
    delayed_flights: int
    total_delay_minutes: float
    average_delay: float
    median_delay: float
    p90_delay: float
    flights_over_30_min: int
    flights_over_60_min: int
    hourly: List[HourlyDelay] = field(default_factory=list)

    @property
    def peak_hour(self) -> Optional[HourlyDelay]:
        """Hour with the highest average delay (earliest wins ties), None if no delays."""
        if not self.hourly:
            return None
        peak = max(self.hourly, key=lambda h: (h.average_delay, -h.hour))
        return peak if peak.average_delay > 0 else None

    @property
    def high_variance_hours(self) -> int:
        return sum(1 for h in self.hourly if h.average_delay > HIGH_VARIANCE_THRESHOLD_MINUTES)

    def to_dict(self) -> dict:
        peak = self.peak_hour
        return {
            'total_flights': self.total_flights,
            'delayed_flights': self.delayed_flights,
            'total_delay_minutes': round(self.total_delay_minutes, 1),
            'average_delay': round(self.average_delay, 1),
            'median_delay': round(self.median_delay, 1),
            'p90_delay': round(self.p90_delay, 1),
            'flights_over_30_min': self.flights_over_30_min,
            'flights_over_60_min': self.flights_over_60_min,
            'peak_delay_hour': peak.label if peak else None,
            'peak_delay_value': round(peak.average_delay, 1) if peak else None,
            'high_variance_hours': self.high_variance_hours,
            'hourly': [
                {
                    'hour': h.hour,
                    'label': h.label,
                    'flights': h.flights,
                    'average_delay': round(h.average_delay, 1),
                    'max_delay': round(h.max_delay, 1),
                }
                for h in self.hourly
            ],
        }


def delay_minutes(flights: Sequence[FlightRecord]) -> np.ndarray:
    """Per-flight delay in minutes, clamped at zero."""
    if not flights:
        return np.zeros(0)
    return np.maximum(np.array([f.delay_minutes for f in flights], dtype=float), 0.0)


def compute_delay_kpis(flights: Sequence[FlightRecord]) -> DelayKPIs:
    """
    Compute delay KPIs for a flight list.

    Flights without a parseable scheduled time still count toward the
    totals but are left out of the hourly breakdown.
    """
    delays = delay_minutes(flights)
    total = len(delays)

    if total == 0:
        return DelayKPIs(
            total_flights=0,
            delayed_flights=0,
            total_delay_minutes=0.0,
            average_delay=0.0,
            median_delay=0.0,
            p90_delay=0.0,
            flights_over_30_min=0,
            flights_over_60_min=0,
        )

    hours = np.array(
        [local_hour(f.schedule_datetime) if f.schedule_datetime else -1 for f in flights],
        dtype=int,
    )

    hourly = []
    for hour in np.unique(hours[hours >= 0]):
        bucket = delays[hours == hour]
        hourly.append(HourlyDelay(
            hour=int(hour),
            flights=int(bucket.size),
            average_delay=float(bucket.mean()),
            max_delay=float(bucket.max()),
        ))

    return DelayKPIs(
        total_flights=total,
        delayed_flights=int(np.count_nonzero(delays > 0)),
        total_delay_minutes=float(delays.sum()),
        average_delay=float(delays.mean()),
        median_delay=float(np.median(delays)),
        p90_delay=float(np.percentile(delays, 90)),
        flights_over_30_min=int(np.count_nonzero(delays > 30)),
        flights_over_60_min=int(np.count_nonzero(delays > 60)),
        hourly=hourly,
    )


@dataclass
class GateChangeEvent:
    """A KLM-operated departure currently flagged with a gate change."""
    flight: FlightRecord
    time_until_departure: Optional[int]  # minutes, negative once past schedule
    delay_minutes: int

    @property
    def is_delayed(self) -> bool:
        return self.flight.has_state('DEL') or self.delay_minutes > DELAYED_THRESHOLD_MINUTES

    @property
    def is_priority(self) -> bool:
        t = self.time_until_departure
        return t is not None and 0 < t < PRIORITY_WINDOW_MINUTES

    def to_dict(self) -> dict:
        f = self.flight
        return {
            'flight_number': str(f.flight_number),
            'flight_name': f.flight_name,
            'current_gate': f.gate,
            'pier': f.pier or 'Unknown',
            'destination': f.destination or 'Unknown',
            'aircraft_type': f.aircraft_type or 'Unknown',
            'schedule_datetime': f.schedule_datetime.isoformat() if f.schedule_datetime else None,
            'time_until_departure': self.time_until_departure,
            'is_delayed': self.is_delayed,
            'delay_minutes': self.delay_minutes,
            'is_priority': self.is_priority,
            'flight_states': list(f.flight_states),
            'flight_states_readable': [FLIGHT_STATE_DESCRIPTIONS.get(s, s) for s in f.flight_states],
        }


def find_gate_changes(
    flights: Sequence[FlightRecord],
    now: Optional[datetime] = None,
) -> List[GateChangeEvent]:
    """
    Extract gate change events, soonest departure first.

    Only KLM-operated flights with an assigned gate and a GCH state are
    reported; codeshares operated by other carriers are skipped.
    """
    now = now or now_amsterdam()
    events = []

    for f in flights:
        if not f.has_state('GCH') or not f.gate:
            continue
        if not is_klm_operated(f):
            logger.debug(f'Excluding non-KLM operated flight {f.flight_name} (operated by {f.operating_flight})')
            continue

        until = None
        if f.schedule_datetime:
            until = round((f.schedule_datetime - now).total_seconds() / 60)

        events.append(GateChangeEvent(
            flight=f,
            time_until_departure=until,
            delay_minutes=max(0, f.delay_minutes),
        ))

    events.sort(key=lambda e: (e.time_until_departure is None, e.time_until_departure or 0))
    return events


def summarize_gate_changes(events: Sequence[GateChangeEvent]) -> Dict[str, int]:
    """Counts shown on the gate-change KPI card."""
    return {
        'total': len(events),
        'urgent': sum(1 for e in events if e.is_priority),
        'delayed': sum(1 for e in events if e.is_delayed),
    }
