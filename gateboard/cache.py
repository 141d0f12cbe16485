"""
Fetch-and-cache gateway for Schiphol flight data.

Sits between the HTTP handlers and the Schiphol API, memoizing the
flight list for each logical query so that dashboard pages polling the
same data never trigger redundant upstream calls.

Guarantees:
- At most one upstream fetch in flight per cache key. Concurrent
  callers for a missing/stale key wait on the fetch already running.
- Entries are replaced wholesale. A failed refresh keeps the previous
  payload and marks it stale; callers get the stale data instead of an
  error.
- Ground-transport services (KL9000-9999) are removed before caching.
- Partial results (pagination cut short) are served, but only stay
  fresh for partial_retry_seconds before the next read refetches.
- No automatic eviction. Entries only disappear through clear().

The gateway is owned by the Flask application (see create_app), not a
module global, so tests and scripts can build isolated instances.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from gateboard.config import config
from gateboard.errors import UpstreamUnavailable
from gateboard.ingestion.schiphol_client import FlightQuery, SchipholClient
from gateboard.models import FlightRecord, exclude_ground_transport

logger = logging.getLogger(__name__)


class EntryStatus(str, Enum):
    """Freshness of a cache entry."""
    FRESH = 'fresh'
    STALE = 'stale'
    REFRESHING = 'refreshing'


@dataclass
class CacheEntry:
    """
    Cached flight list for one query.

    records is a tuple of frozen dataclasses, so handing out list()
    copies is enough to keep callers from touching cached state.
    """
    key: str
    records: Tuple[FlightRecord, ...]
    fetched_at: float
    status: EntryStatus = EntryStatus.FRESH
    partial: bool = False
    pages: int = 0
    last_error: Optional[str] = None


@dataclass
class CacheResult:
    """
    What a caller gets back from the gateway.

    state is one of:
    - 'hit': served from a fresh entry
    - 'miss': this caller ran the upstream fetch
    - 'wait': this caller joined another caller's in-flight fetch
    - 'stale': upstream failed, previous payload served instead
    """
    key: str
    flights: List[FlightRecord]
    state: str
    partial: bool = False
    fetched_at: Optional[float] = None
    age_seconds: Optional[float] = None
    error: Optional[str] = None

    @property
    def is_stale(self) -> bool:
        return self.state == 'stale'


class _InFlight:
    """Rendezvous for callers waiting on the same upstream fetch."""

    def __init__(self):
        self.done = threading.Event()
        self.entry: Optional[CacheEntry] = None
        self.error: Optional[BaseException] = None


@dataclass
class _Counters:
    hits: int = 0
    misses: int = 0
    coalesced: int = 0
    stale_served: int = 0
    upstream_fetches: int = 0
    upstream_failures: int = 0
    started_at: float = field(default_factory=time.time)


class FlightCache:
    """
    Thread-safe in-memory cache of flight lists keyed by query.

    Provides read-through access with a fixed TTL, request coalescing,
    non-blocking warm-up and manual invalidation.
    """

    def __init__(
        self,
        client: Optional[SchipholClient] = None,
        ttl_seconds: Optional[int] = None,
        partial_retry_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client or SchipholClient.from_config()
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else config.cache.ttl_seconds
        if partial_retry_seconds is None:
            partial_retry_seconds = config.cache.partial_retry_seconds
        self.partial_retry_seconds = min(partial_retry_seconds, self.ttl_seconds)
        self._clock = clock

        self._entries: Dict[str, CacheEntry] = {}
        self._in_flight: Dict[str, _InFlight] = {}
        self._lock = threading.RLock()

        # Statistics
        self._counters = _Counters()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, key: str, query: FlightQuery) -> List[FlightRecord]:
        """
        Get flights for a query, fetching if missing or expired.

        Returns a copy of the cached list. Falls back to the stale
        entry when the upstream fails.

        Raises:
            UpstreamUnavailable if the upstream fails and nothing is cached
        """
        return self.lookup(key, query).flights

    def lookup(self, key: str, query: FlightQuery) -> CacheResult:
        """Like get(), but also reports how the result was obtained."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._is_fresh(entry):
                self._counters.hits += 1
                logger.debug(f'Cache hit for {key}')
                return self._to_result(entry, 'hit')

            self._counters.misses += 1
            flight, owner = self._claim_fetch(key)

        return self._complete(key, query, flight, owner)

    def refresh(self, key: str, query: FlightQuery) -> CacheResult:
        """
        Fetch from upstream regardless of freshness.

        Joins the in-flight fetch if one is already running for the key.
        """
        with self._lock:
            flight, owner = self._claim_fetch(key)

        return self._complete(key, query, flight, owner)

    def ensure_warmed(self, key: str, query: FlightQuery) -> bool:
        """
        Start a background fetch if the key is missing or stale.

        Idempotent and non-blocking: returns immediately, and does nothing
        if the entry is fresh or a fetch is already running.

        Returns:
            True if a background fetch was started.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._is_fresh(entry):
                return False
            if key in self._in_flight:
                return False
            flight, _ = self._claim_fetch(key)

        thread = threading.Thread(
            target=self._background_fetch,
            args=(key, query, flight),
            name=f'warm-{key}',
            daemon=True,
        )
        thread.start()
        logger.info(f'Background warm-up started for {key}')
        return True

    # -------------------------------------------------------------------------
    # Invalidation and monitoring
    # -------------------------------------------------------------------------

    def clear(self, key: Optional[str] = None) -> int:
        """
        Remove one entry, or all entries when key is None.

        Unknown keys are ignored. In-flight fetches are left running and
        will repopulate their key when they finish.

        Returns count of entries removed.
        """
        with self._lock:
            if key is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                removed = 1 if self._entries.pop(key, None) is not None else 0

        logger.info(f'Cache cleared: {removed} entries removed' + (f' (key={key})' if key else ''))
        return removed

    def refresh_status(self) -> List[str]:
        """Keys with an upstream fetch currently in flight."""
        with self._lock:
            return sorted(self._in_flight)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        now = self._clock()
        with self._lock:
            entries = {}
            for key, entry in self._entries.items():
                entries[key] = {
                    'age_seconds': round(now - entry.fetched_at, 1),
                    'status': self._status_of(entry).value,
                    'flights': len(entry.records),
                    'pages': entry.pages,
                    'partial': entry.partial,
                    'last_error': entry.last_error,
                }

            valid = sum(1 for e in self._entries.values() if self._is_fresh(e))
            oldest = max((now - e.fetched_at for e in self._entries.values()), default=0)
            c = self._counters
            lookups = c.hits + c.misses

            return {
                'entries': len(self._entries),
                'valid_entries': valid,
                'ttl_seconds': self.ttl_seconds,
                'oldest_entry_age_seconds': round(oldest, 1),
                'hits': c.hits,
                'misses': c.misses,
                'hit_rate': c.hits / lookups if lookups > 0 else 0,
                'coalesced': c.coalesced,
                'stale_served': c.stale_served,
                'upstream_fetches': c.upstream_fetches,
                'upstream_failures': c.upstream_failures,
                'in_flight': sorted(self._in_flight),
                'keys': entries,
            }

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _is_fresh(self, entry: CacheEntry) -> bool:
        if entry.status == EntryStatus.STALE:
            return False
        max_age = self.partial_retry_seconds if entry.partial else self.ttl_seconds
        return self._clock() - entry.fetched_at < max_age

    def _status_of(self, entry: CacheEntry) -> EntryStatus:
        if entry.key in self._in_flight:
            return EntryStatus.REFRESHING
        return EntryStatus.FRESH if self._is_fresh(entry) else EntryStatus.STALE

    def _claim_fetch(self, key: str) -> Tuple[_InFlight, bool]:
        """
        Register interest in a fetch for key. Caller must hold the lock.

        Returns the in-flight marker and whether the caller owns the fetch.
        """
        flight = self._in_flight.get(key)
        if flight is not None:
            self._counters.coalesced += 1
            return flight, False

        flight = _InFlight()
        self._in_flight[key] = flight
        entry = self._entries.get(key)
        # A stale entry stays stale until a fetch succeeds
        if entry is not None and entry.status == EntryStatus.FRESH:
            entry.status = EntryStatus.REFRESHING
        return flight, True

    def _complete(self, key: str, query: FlightQuery, flight: _InFlight, owner: bool) -> CacheResult:
        if owner:
            self._run_fetch(key, query, flight)
        else:
            logger.debug(f'Waiting on in-flight fetch for {key}')
            flight.done.wait()

        if flight.entry is not None:
            return self._to_result(flight.entry, 'miss' if owner else 'wait')

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._counters.stale_served += 1
                logger.warning(f'Serving stale data for {key}: {flight.error}')
                return self._to_result(entry, 'stale', error=str(flight.error))

        raise flight.error

    def _run_fetch(self, key: str, query: FlightQuery, flight: _InFlight) -> None:
        """
        Fetch from upstream and publish the outcome to all waiters.

        The in-flight marker is always released, so waiters never hang
        even if storing the result fails.
        """
        try:
            result = self.client.fetch_flights(query)

            records = exclude_ground_transport(result.records)
            removed = len(result.records) - len(records)
            if removed:
                logger.debug(f'Excluded {removed} ground-transport services from {key}')

            # Partial entries stay fresh for partial_retry_seconds only
            entry = CacheEntry(
                key=key,
                records=tuple(records),
                fetched_at=self._clock(),
                partial=result.partial,
                pages=result.pages,
                last_error=result.error,
            )

            with self._lock:
                self._counters.upstream_fetches += 1
                self._entries[key] = entry
            flight.entry = entry

        except Exception as e:
            if not isinstance(e, UpstreamUnavailable):
                logger.exception(f'Unexpected error fetching {key}')
            flight.error = e
            with self._lock:
                self._counters.upstream_failures += 1
                stale = self._entries.get(key)
                if stale is not None:
                    stale.status = EntryStatus.STALE
                    stale.last_error = str(e)
            return

        finally:
            with self._lock:
                self._in_flight.pop(key, None)
            flight.done.set()

        logger.info(f'Cached {len(records)} flights for {key}' + (' (partial)' if result.partial else ''))

    def _background_fetch(self, key: str, query: FlightQuery, flight: _InFlight) -> None:
        self._run_fetch(key, query, flight)
        if flight.error is not None:
            logger.error(f'Background warm-up failed for {key}: {flight.error}')

    def _to_result(self, entry: CacheEntry, state: str, error: Optional[str] = None) -> CacheResult:
        return CacheResult(
            key=entry.key,
            flights=list(entry.records),
            state=state,
            partial=entry.partial,
            fetched_at=entry.fetched_at,
            age_seconds=max(0.0, self._clock() - entry.fetched_at),
            error=error or entry.last_error,
        )
