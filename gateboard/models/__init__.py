"""
Data models for GateBoard.

Flights are plain immutable dataclasses parsed from the Schiphol API;
nothing is persisted, the in-memory cache is the only store.
"""

from gateboard.models.flight import (
    FlightRecord,
    is_ground_transport,
    exclude_ground_transport,
    parse_api_datetime,
)

__all__ = [
    'FlightRecord',
    'is_ground_transport',
    'exclude_ground_transport',
    'parse_api_datetime',
]
