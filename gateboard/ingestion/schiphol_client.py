"""
Schiphol public flights API client.

Handles communication with the Schiphol REST API, including:
- Static credential headers (app_id / app_key)
- Query parameters for direction, airline and schedule date
- Page-by-page retrieval until the end-of-data sentinel
- Per-page timeouts and error classification

Response format (v4):
    {"flights": [{"flightName": "KL1001", "flightNumber": 1001, ...}, ...]}

The API does not report a total page count, so pagination continues
until a page comes back with zero flights.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, List

import requests

from gateboard.config import config
from gateboard.errors import UpstreamUnavailable
from gateboard.models import FlightRecord
from gateboard.timeutils import today_amsterdam

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlightQuery:
    """
    One logical query against the flights endpoint.

    Two queries with the same cache_key share a cache entry; max_pages
    only bounds how far pagination may go and is not part of the key.
    """
    flight_direction: Optional[str] = None  # 'D' departures, 'A' arrivals
    airline: Optional[str] = None
    schedule_date: Optional[str] = None  # YYYY-MM-DD
    fetch_all_pages: bool = False
    max_pages: int = config.schiphol.max_pages

    @classmethod
    def daily_departures(cls, airline: Optional[str] = None, schedule_date: Optional[str] = None) -> 'FlightQuery':
        """All departures of one airline for a day (today in Amsterdam by default)."""
        return cls(
            flight_direction='D',
            airline=airline or config.refresh.airline,
            schedule_date=schedule_date or today_amsterdam(),
            fetch_all_pages=True,
        )

    @property
    def cache_key(self) -> str:
        return ':'.join([
            'flights',
            self.flight_direction or 'any',
            (self.airline or 'any').upper(),
            self.schedule_date or 'any',
            'all-pages' if self.fetch_all_pages else 'single-page',
        ])

    def to_params(self, page: Optional[int] = None) -> dict:
        """Convert to Schiphol API query parameters."""
        params = {}
        if self.flight_direction:
            params['flightDirection'] = self.flight_direction
        if self.airline:
            params['airline'] = self.airline
        if self.schedule_date:
            params['scheduleDate'] = self.schedule_date
        if page is not None:
            params['page'] = page
        return params


@dataclass
class PageResult:
    """
    Outcome of one (possibly multi-page) fetch.

    partial is set when a page failed after earlier pages succeeded;
    records then hold everything accumulated before the failure.
    """
    records: List[FlightRecord] = field(default_factory=list)
    requests_made: int = 0
    pages: int = 0
    partial: bool = False
    error: Optional[str] = None


class SchipholClient:
    """
    Client for the Schiphol public flights API.

    Handles:
    - GET requests to /flights
    - Credential and version headers
    - Sequential pagination with a small courtesy delay
    - Translating transport/HTTP failures into UpstreamUnavailable
    """

    def __init__(
        self,
        app_id: Optional[str] = None,
        app_key: Optional[str] = None,
        base_url: str = 'https://api.schiphol.nl/public-flights',
        resource_version: str = 'v4',
        timeout: float = 10.0,
        page_delay: float = 0.1,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.app_id = app_id
        self.app_key = app_key
        self.resource_version = resource_version
        self.timeout = timeout
        self.page_delay = page_delay
        self.session = session or requests.Session()

        if not (app_id and app_key):
            logger.warning('Schiphol client has no credentials configured (requests will be rejected)')

    @classmethod
    def from_config(cls) -> 'SchipholClient':
        """Create client from application configuration."""
        return cls(
            app_id=config.schiphol.app_id,
            app_key=config.schiphol.app_key,
            base_url=config.schiphol.base_url,
            resource_version=config.schiphol.resource_version,
            timeout=config.schiphol.page_timeout_seconds,
            page_delay=config.schiphol.page_delay_seconds,
        )

    @property
    def headers(self) -> dict:
        return {
            'Accept': 'application/json',
            'app_id': self.app_id or '',
            'app_key': self.app_key or '',
            'ResourceVersion': self.resource_version,
        }

    def fetch_page(self, query: FlightQuery, page: Optional[int] = None) -> List[FlightRecord]:
        """Fetch and parse a single page of flights."""
        return self._parse_flights(self._request_page(query, page), page)

    def _request_page(self, query: FlightQuery, page: Optional[int] = None) -> List[dict]:
        """
        Request a single page of raw flight objects.

        Args:
            query: Query parameters
            page: Zero-based page number, or None to let the API default

        Returns:
            Raw flight objects (empty at end of data)

        Raises:
            UpstreamUnavailable on network, timeout, HTTP or decoding errors
        """
        url = f'{self.base_url}/flights'
        params = query.to_params(page)

        logger.debug(f'Fetching flights: {url} params={params}')

        try:
            response = self.session.get(
                url,
                params=params,
                headers=self.headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.Timeout:
            logger.error(f'Schiphol API timeout on page {page}')
            raise UpstreamUnavailable('Schiphol API request timed out', page=page)
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 429:
                message = 'Rate limit exceeded. Please try again later.'
            elif status == 401:
                message = 'Invalid API credentials.'
            elif status == 403:
                message = 'Access forbidden. Check API permissions.'
            else:
                message = f'Schiphol API error: {status}'
            logger.error(f'Schiphol API error on page {page}: {status} ({message})')
            raise UpstreamUnavailable(message, status_code=status, page=page)
        except ValueError as e:
            logger.error(f'Failed to parse JSON on page {page}: {e}')
            raise UpstreamUnavailable('Schiphol API returned invalid JSON', page=page)
        except requests.exceptions.RequestException as e:
            logger.error(f'Schiphol request failed on page {page}: {e}')
            raise UpstreamUnavailable(f'Schiphol request failed: {e}', page=page)

        if not isinstance(data, dict):
            raise UpstreamUnavailable('Schiphol API returned an unexpected payload', page=page)

        flights_raw = data.get('flights') or []
        if not isinstance(flights_raw, list):
            raise UpstreamUnavailable('Schiphol API returned an unexpected payload', page=page)

        return flights_raw

    def _parse_flights(self, flights_raw: List[dict], page: Optional[int]) -> List[FlightRecord]:
        """Parse raw flights, skipping (and logging) entries that cannot be parsed."""
        records = []
        for raw in flights_raw:
            if not isinstance(raw, dict):
                logger.warning(f'Skipping non-object flight entry on page {page}')
                continue
            try:
                records.append(FlightRecord.from_api(raw))
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning(f'Skipping malformed flight {raw.get("flightName")!r} on page {page}: {e}')

        return records

    def fetch_flights(self, query: FlightQuery) -> PageResult:
        """
        Fetch flights for a query, following pagination if requested.

        Raises:
            UpstreamUnavailable if nothing could be fetched at all
        """
        if query.fetch_all_pages:
            return self.fetch_all_pages(query)

        records = self.fetch_page(query)
        logger.info(f'Received {len(records)} flights from Schiphol (single page)')
        return PageResult(records=records, requests_made=1, pages=1 if records else 0)

    def fetch_all_pages(self, query: FlightQuery) -> PageResult:
        """
        Fetch sequential pages (0, 1, 2, ...) until an empty page.

        A failing page stops pagination. If earlier pages succeeded the
        accumulated records are returned with partial=True; if the first
        page fails there is nothing to return and the error propagates.
        """
        result = PageResult()
        page = 0

        while page < query.max_pages:
            result.requests_made += 1
            try:
                flights_raw = self._request_page(query, page=page)
            except UpstreamUnavailable as e:
                if page == 0:
                    raise
                logger.warning(
                    f'Pagination aborted at page {page}, returning '
                    f'{len(result.records)} flights from {result.pages} pages: {e}'
                )
                result.partial = True
                result.error = str(e)
                break

            logger.debug(f'Page {page}: {len(flights_raw)} flights')

            # End-of-data sentinel
            if not flights_raw:
                break

            result.records.extend(self._parse_flights(flights_raw, page))
            result.pages += 1
            page += 1

            if self.page_delay and page < query.max_pages:
                time.sleep(self.page_delay)
        else:
            logger.warning(f'Stopped after max_pages={query.max_pages} without reaching an empty page')

        logger.info(f'Total flights fetched: {len(result.records)} from {result.pages} pages')

        return result
