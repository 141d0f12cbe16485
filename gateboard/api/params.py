"""
Query parameter parsing shared by the API blueprints.

Every endpoint that reads flights turns its request arguments into a
FlightQuery here, so bad input is rejected with a 400 before it can
reach the cache or the Schiphol API.
"""

import re
from typing import Optional

from gateboard.ingestion.schiphol_client import FlightQuery
from gateboard.timeutils import today_amsterdam

_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_AIRLINE_RE = re.compile(r'^[A-Za-z0-9]{2,3}$')


class InvalidQuery(ValueError):
    """Invalid query parameter."""


def parse_date(value: Optional[str]) -> str:
    """YYYY-MM-DD date argument, defaulting to today in Amsterdam."""
    if not value:
        return today_amsterdam()
    if not _DATE_RE.match(value):
        raise InvalidQuery('date must be YYYY-MM-DD')
    return value


def parse_airline(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not _AIRLINE_RE.match(value):
        raise InvalidQuery('airline must be a 2-3 character airline code')
    return value.upper()


def parse_bool(args, name: str, default: bool) -> bool:
    return args.get(name, 'true' if default else 'false').lower() == 'true'


def parse_limit(args, default: int = 500, maximum: int = 2000) -> int:
    try:
        limit = int(args.get('limit', default))
    except ValueError:
        raise InvalidQuery('limit must be an integer')
    if limit < 0:
        raise InvalidQuery('limit must not be negative')
    return min(limit, maximum)


def query_from_args(args) -> FlightQuery:
    """
    Build a FlightQuery from request arguments.

    Query parameters:
    - direction: D or A (default D)
    - airline: airline code (default KL, 'all' for every airline)
    - date: YYYY-MM-DD (default today in Amsterdam)
    - all_pages: boolean, follow pagination (default true)
    """
    direction = args.get('direction', 'D').upper()
    if direction not in ('D', 'A'):
        raise InvalidQuery('direction must be D or A')

    airline = args.get('airline', 'KL')
    airline = None if airline.lower() == 'all' else parse_airline(airline)

    return FlightQuery(
        flight_direction=direction,
        airline=airline,
        schedule_date=parse_date(args.get('date')),
        fetch_all_pages=parse_bool(args, 'all_pages', True),
    )


def daily_query_from_args(args) -> FlightQuery:
    """
    The dashboard's daily departures query for the given arguments.

    Query parameters:
    - airline: airline code (default from REFRESH_AIRLINE)
    - date: YYYY-MM-DD (default today in Amsterdam)
    """
    return FlightQuery.daily_departures(
        airline=parse_airline(args.get('airline')),
        schedule_date=parse_date(args.get('date')),
    )
