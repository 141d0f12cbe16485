"""
Background refresh scheduler - keeps registered cache keys warm.

Each registered task names a cache key and the query that fills it.
A background thread wakes up every check interval and refreshes tasks
whose next refresh time has passed, so dashboard requests normally find
a fresh entry instead of paying for a full multi-page fetch.

Timing per task:
- next refresh = last refresh + cache TTL - lead time
- on failure, retry after the retry delay
- a task already refreshing is skipped until it finishes

Registration is an explicit step (done by the app factory at startup).
Reading the status never registers anything.
"""

import logging
import threading
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Union

from gateboard.cache import FlightCache
from gateboard.config import config
from gateboard.ingestion.schiphol_client import FlightQuery

logger = logging.getLogger(__name__)


@dataclass
class RefreshTask:
    """
    A cache key kept warm by the scheduler.

    source is either a fixed query or a zero-argument callable returning
    one; a callable lets date-based queries roll over at midnight.
    """
    task_id: str
    source: Union[FlightQuery, Callable[[], FlightQuery]]
    max_pages: int
    last_refresh: float
    next_refresh: float
    is_refreshing: bool = False
    refresh_count: int = 0
    failure_count: int = 0
    last_error: Optional[str] = None

    @property
    def query(self) -> FlightQuery:
        query = self.source() if callable(self.source) else self.source
        return replace(query, max_pages=min(query.max_pages, self.max_pages))

    @property
    def key(self) -> str:
        return self.query.cache_key


def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


class RefreshScheduler:
    """
    Periodically refreshes registered cache keys.

    Can run as a background thread (start_background) or be driven
    manually with run_due() for tests and scripts.
    """

    def __init__(
        self,
        cache: FlightCache,
        check_interval: Optional[float] = None,
        lead_seconds: Optional[float] = None,
        retry_seconds: Optional[float] = None,
        max_pages: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.cache = cache
        self.check_interval = check_interval or config.refresh.check_interval_seconds
        self.lead_seconds = lead_seconds if lead_seconds is not None else config.refresh.lead_seconds
        self.retry_seconds = retry_seconds if retry_seconds is not None else config.refresh.retry_seconds
        self.max_pages = max_pages or config.refresh.max_pages
        self._clock = clock

        self._tasks: Dict[str, RefreshTask] = {}
        self._lock = threading.Lock()

        # State tracking
        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._cycle_count = 0

    @property
    def refresh_period(self) -> float:
        """Seconds between successful refreshes of one task."""
        return max(0.0, self.cache.ttl_seconds - self.lead_seconds)

    def register(
        self,
        task_id: str,
        query: Union[FlightQuery, Callable[[], FlightQuery]],
        warm: bool = True,
    ) -> RefreshTask:
        """
        Register (or replace) a task and optionally warm its key now.

        Background refreshes are capped at max_pages to keep each cycle
        short. Re-registering the same task_id is harmless.
        """
        now = self._clock()
        task = RefreshTask(
            task_id=task_id,
            source=query,
            max_pages=self.max_pages,
            last_refresh=now,
            next_refresh=now + self.refresh_period,
        )

        with self._lock:
            self._tasks[task_id] = task

        logger.info(
            f'Registered cache refresh task: {task_id}, '
            f'next refresh in {round(self.refresh_period)}s'
        )

        if warm:
            initial = task.query
            self.cache.ensure_warmed(initial.cache_key, initial)

        return task

    def unregister(self, task_id: str) -> bool:
        """Remove a task. Unknown ids are ignored."""
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    def due_tasks(self) -> List[RefreshTask]:
        now = self._clock()
        with self._lock:
            return [
                t for t in self._tasks.values()
                if not t.is_refreshing and now >= t.next_refresh
            ]

    def refresh_task(self, task: RefreshTask) -> bool:
        """
        Refresh one task through the cache.

        Returns True if fresh, complete data was fetched.
        """
        task.is_refreshing = True
        logger.info(f'Starting background refresh for: {task.task_id}')
        start = time.perf_counter()

        try:
            query = task.query
            result = self.cache.refresh(query.cache_key, query)
        except Exception as e:
            task.failure_count += 1
            task.last_error = str(e)
            task.next_refresh = self._clock() + self.retry_seconds
            logger.error(f'Background refresh failed for: {task.task_id}: {e}')
            return False
        finally:
            task.is_refreshing = False

        duration = time.perf_counter() - start

        if result.state == 'stale' or result.partial:
            task.failure_count += 1
            task.last_error = result.error
            task.next_refresh = self._clock() + self.retry_seconds
            logger.warning(f'Background refresh for {task.task_id} incomplete, retrying in {self.retry_seconds}s')
            return False

        task.refresh_count += 1
        task.last_error = None
        task.last_refresh = self._clock()
        task.next_refresh = task.last_refresh + self.refresh_period

        logger.info(f'Background refresh completed for: {task.task_id} (took {duration:.1f}s)')
        return True

    def run_due(self) -> int:
        """
        Execute one scheduler cycle.

        Returns count of tasks refreshed successfully.
        """
        self._cycle_count += 1
        tasks = self.due_tasks()
        if not tasks:
            return 0

        logger.debug(f'Found {len(tasks)} caches to refresh')
        return sum(1 for task in tasks if self.refresh_task(task))

    def run_continuous(self) -> None:
        """
        Run the refresh loop until stop() is called.

        This method blocks - use start_background() for non-blocking.
        """
        self._running = True
        logger.info(f'Background cache refresh cycle started (interval={self.check_interval}s)')

        while not self._stop_event.wait(self.check_interval):
            try:
                self.run_due()
            except Exception as e:
                logger.error(f'Refresh cycle error: {e}')

        self._running = False
        logger.info('Background cache refresh cycle stopped')

    def start_background(self) -> None:
        """Start the refresh loop in a background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning('Refresh scheduler already running')
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_continuous,
            name='cache-refresher',
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop the background refresh loop."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5)
        self._running = False

    def status(self) -> List[dict]:
        """Per-task refresh status for monitoring."""
        now = self._clock()
        with self._lock:
            tasks = list(self._tasks.values())

        return [
            {
                'id': t.task_id,
                'key': t.key,
                'last_refresh': _iso(t.last_refresh),
                'next_refresh': _iso(t.next_refresh),
                'seconds_until_refresh': max(0, round(t.next_refresh - now)),
                'is_refreshing': t.is_refreshing,
                'refresh_count': t.refresh_count,
                'failure_count': t.failure_count,
                'last_error': t.last_error,
            }
            for t in tasks
        ]

    @property
    def stats(self) -> dict:
        """Get scheduler statistics."""
        with self._lock:
            task_count = len(self._tasks)
        return {
            'running': self._running,
            'tasks': task_count,
            'cycle_count': self._cycle_count,
            'check_interval': self.check_interval,
        }
