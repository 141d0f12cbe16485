"""
Analytics module for GateBoard.

Pure functions over cached flight lists:
- Filtering (KLM-operated, schedule date, operational state, dedup)
- Delay KPIs with an hourly breakdown (NumPy)
- Gate change detection and counts
- Gate and pier usage, European routes, aircraft type performance
"""

from gateboard.analytics.filters import (
    filter_flights,
    remove_duplicate_flights,
    is_klm_operated,
    is_operational,
)
from gateboard.analytics.kpis import (
    DelayKPIs,
    GateChangeEvent,
    compute_delay_kpis,
    find_gate_changes,
    summarize_gate_changes,
)
from gateboard.analytics.operations import (
    compute_aircraft_performance,
    compute_destinations,
    compute_gate_usage,
    compute_route_delays,
)

__all__ = [
    'filter_flights',
    'remove_duplicate_flights',
    'is_klm_operated',
    'is_operational',
    'DelayKPIs',
    'GateChangeEvent',
    'compute_delay_kpis',
    'find_gate_changes',
    'summarize_gate_changes',
    'compute_aircraft_performance',
    'compute_destinations',
    'compute_gate_usage',
    'compute_route_delays',
]
