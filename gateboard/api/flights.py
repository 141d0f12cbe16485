"""
Flight data API endpoints.

Provides endpoints for:
- GET /api/flights - Cached flight list for a query
- GET /api/flights/gate-changes - Departures currently flagged with a gate change

All data is served through the flight cache; a request only reaches
the Schiphol API when its cache entry is missing or expired.
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request, current_app

from gateboard.analytics import (
    filter_flights,
    remove_duplicate_flights,
    find_gate_changes,
    summarize_gate_changes,
)
from gateboard.api.params import (
    daily_query_from_args,
    parse_bool,
    parse_limit,
    query_from_args,
)
from gateboard.timeutils import now_amsterdam

logger = logging.getLogger(__name__)

flights_bp = Blueprint('flights', __name__, url_prefix='/api/flights')


@flights_bp.route('', methods=['GET'])
def list_flights():
    """
    List flights for a query, served from cache.

    Query parameters: those of params.query_from_args, plus
    - klm_operated: boolean, drop codeshares (default false)
    - operational_only: boolean, drop cancelled flights (default true)
    - limit: int, max results to return (default 500)

    Response includes cache state so clients can tell fresh from stale.
    """
    start_time = time.perf_counter()

    query = query_from_args(request.args)
    limit = parse_limit(request.args)

    result = current_app.config['FLIGHT_CACHE'].lookup(query.cache_key, query)

    flights = filter_flights(
        result.flights,
        schedule_date=query.schedule_date,
        klm_operated_only=parse_bool(request.args, 'klm_operated', False),
        operational_only=parse_bool(request.args, 'operational_only', True),
    )
    flights = remove_duplicate_flights(flights)
    flights.sort(key=lambda f: (f.schedule_datetime is None, f.schedule_datetime or datetime.min.replace(tzinfo=timezone.utc)))

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'flights': [f.to_dict() for f in flights[:limit]],
        'count': min(len(flights), limit),
        'total': len(flights),
        'cache': {
            'key': result.key,
            'state': result.state,
            'partial': result.partial,
            'age_seconds': round(result.age_seconds or 0, 1),
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round(query_time_ms, 2),
    })


@flights_bp.route('/gate-changes', methods=['GET'])
def get_gate_changes():
    """
    Get gate change events for today's KLM-operated departures.

    Query parameters:
    - airline: airline code (default KL)
    - date: YYYY-MM-DD (default today in Amsterdam)
    """
    start_time = time.perf_counter()

    query = daily_query_from_args(request.args)
    result = current_app.config['FLIGHT_CACHE'].lookup(query.cache_key, query)

    flights = filter_flights(
        result.flights,
        schedule_date=query.schedule_date,
        operational_only=True,
    )
    flights = remove_duplicate_flights(flights)

    now = now_amsterdam()
    events = find_gate_changes(flights, now=now)
    logger.info(f'Found {len(events)} gate change events')

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'gate_change_events': [e.to_dict() for e in events],
        'metadata': {
            **summarize_gate_changes(events),
            'timestamp': now.isoformat(),
            'cache_state': result.state,
            'partial': result.partial,
        },
        'query_time_ms': round(query_time_ms, 2),
    })
