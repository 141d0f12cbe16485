"""
Dashboard KPI, analytics and status API endpoints.

Provides endpoints for:
- GET /api/dashboard/kpis - Delay KPIs and gate-change counts
- GET /api/dashboard/gates - Gate and pier usage
- GET /api/dashboard/routes - Departures per European destination
- GET /api/dashboard/routes/delays - Delay statistics per destination
- GET /api/dashboard/aircraft - Delay performance per aircraft type
- GET /api/dashboard/status - System status and health

Analytics endpoints accept the airline and date parameters of
params.daily_query_from_args.
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request, current_app

from gateboard.analytics import (
    compute_aircraft_performance,
    compute_delay_kpis,
    compute_destinations,
    compute_gate_usage,
    compute_route_delays,
    filter_flights,
    find_gate_changes,
    remove_duplicate_flights,
    summarize_gate_changes,
)
from gateboard.api.params import daily_query_from_args
from gateboard.config import config

logger = logging.getLogger(__name__)

metrics_bp = Blueprint('metrics', __name__, url_prefix='/api/dashboard')


def _klm_departures(operational_only: bool = True):
    """Deduplicated KLM-operated departures for the request's date, plus the cache lookup."""
    query = daily_query_from_args(request.args)
    result = current_app.config['FLIGHT_CACHE'].lookup(query.cache_key, query)

    flights = filter_flights(
        result.flights,
        schedule_date=query.schedule_date,
        klm_operated_only=True,
        operational_only=operational_only,
    )
    return remove_duplicate_flights(flights), result


def _cache_metadata(result, start_time: float) -> dict:
    return {
        'cache_state': result.state,
        'partial': result.partial,
        'last_updated': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round((time.perf_counter() - start_time) * 1000, 2),
    }


@metrics_bp.route('/kpis', methods=['GET'])
def get_dashboard_kpis():
    """
    Get KPIs for today's KLM-operated departures.

    Returns:
    - Delay totals, averages and thresholds
    - Peak delay hour and hourly breakdown
    - Gate change counts
    """
    start_time = time.perf_counter()
    flights, result = _klm_departures()

    kpis = compute_delay_kpis(flights)
    gate_changes = summarize_gate_changes(find_gate_changes(flights))

    return jsonify({
        'kpis': kpis.to_dict(),
        'gate_changes': gate_changes,
        'data_source': 'schiphol-api',
        **_cache_metadata(result, start_time),
    })


@metrics_bp.route('/gates', methods=['GET'])
def get_gate_usage():
    """Departures per gate and pier with pier utilisation, busiest first."""
    start_time = time.perf_counter()
    flights, result = _klm_departures()

    return jsonify({
        **compute_gate_usage(flights).to_dict(),
        **_cache_metadata(result, start_time),
    })


@metrics_bp.route('/routes', methods=['GET'])
def get_destinations():
    """Top European destinations by departures, with a summary."""
    start_time = time.perf_counter()
    flights, result = _klm_departures()

    return jsonify({
        **compute_destinations(flights).to_dict(),
        **_cache_metadata(result, start_time),
    })


@metrics_bp.route('/routes/delays', methods=['GET'])
def get_route_delays():
    """Delay statistics for the busiest European routes."""
    start_time = time.perf_counter()
    flights, result = _klm_departures()

    return jsonify({
        'routes': [r.to_dict() for r in compute_route_delays(flights)],
        **_cache_metadata(result, start_time),
    })


@metrics_bp.route('/aircraft', methods=['GET'])
def get_aircraft_performance():
    """
    Delay performance per aircraft type.

    Cancelled flights are included so every type flown today is listed.
    """
    start_time = time.perf_counter()
    flights, result = _klm_departures(operational_only=False)

    return jsonify({
        **compute_aircraft_performance(flights).to_dict(),
        **_cache_metadata(result, start_time),
    })


@metrics_bp.route('/status', methods=['GET'])
def get_system_status():
    """
    Get system health and status information.

    Returns:
    - Cache statistics
    - Refresh scheduler status
    - Configuration info
    """
    cache = current_app.config['FLIGHT_CACHE']
    scheduler = current_app.config.get('REFRESH_SCHEDULER')
    scheduler_stats = scheduler.stats if scheduler else {'running': False}

    return jsonify({
        'status': 'healthy' if (config.schiphol.is_configured and scheduler_stats.get('running')) else 'degraded',
        'cache': cache.stats,
        'refresh': scheduler_stats,
        'config': {
            'cache_ttl_seconds': cache.ttl_seconds,
            'schiphol_configured': config.schiphol.is_configured,
            'page_timeout_seconds': config.schiphol.page_timeout_seconds,
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })
