"""Shared fixtures for GateBoard tests."""

import threading
import time
from datetime import datetime
from typing import List, Optional

import pytest

from gateboard.cache import FlightCache
from gateboard.errors import UpstreamUnavailable
from gateboard.ingestion.schiphol_client import PageResult
from gateboard.models import FlightRecord
from gateboard.timeutils import AMSTERDAM

TEST_DATE = '2026-10-18'


def make_flight(
    number: int = 1001,
    schedule: Optional[datetime] = None,
    estimated: Optional[datetime] = None,
    states=('SCH',),
    gate: str = 'D7',
    main_flight: Optional[str] = None,
    updated: Optional[datetime] = None,
    schedule_date: str = TEST_DATE,
) -> FlightRecord:
    """Build a KL departure with sensible defaults."""
    schedule = schedule or datetime(2026, 10, 18, 10, 0, tzinfo=AMSTERDAM)
    return FlightRecord(
        flight_number=number,
        flight_name=f'KL{number}',
        flight_direction='D',
        schedule_datetime=schedule,
        schedule_date=schedule_date,
        estimated_off_block=estimated or schedule,
        gate=gate,
        pier=gate[:1],
        destinations=('LHR',),
        flight_states=tuple(states),
        aircraft_type='73H',
        main_flight=main_flight or f'KL{number}',
        prefix_iata='KL',
        prefix_icao='KLM',
        last_updated_at=updated,
    )


def wait_until(predicate, timeout: float = 5.0) -> bool:
    """Poll predicate until it holds or the timeout passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeClient:
    """
    Stand-in for SchipholClient.

    Returns the configured records, or raises UpstreamUnavailable while
    fail is set. Every query received is recorded.
    """

    def __init__(self, records: Optional[List[FlightRecord]] = None):
        self.records = records if records is not None else [make_flight(1001), make_flight(1002)]
        self.partial = False
        self.fail = False
        self.queries = []

    @property
    def calls(self) -> int:
        return len(self.queries)

    def fetch_flights(self, query) -> PageResult:
        self.queries.append(query)
        if self.fail:
            raise UpstreamUnavailable('Schiphol API request timed out', page=0)
        return PageResult(
            records=list(self.records),
            requests_made=1,
            pages=1,
            partial=self.partial,
            error='page 1 failed' if self.partial else None,
        )


class BlockingClient(FakeClient):
    """FakeClient whose fetch blocks until release() is called."""

    def __init__(self, records=None):
        super().__init__(records)
        self.started = threading.Event()
        self._gate = threading.Event()

    def release(self) -> None:
        self._gate.set()

    def fetch_flights(self, query) -> PageResult:
        self.started.set()
        assert self._gate.wait(timeout=5), 'fetch was never released'
        return super().fetch_flights(query)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def cache(client, clock) -> FlightCache:
    return FlightCache(client=client, ttl_seconds=600, clock=clock)
