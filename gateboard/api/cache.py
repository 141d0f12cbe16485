"""
Cache administration API endpoints.

Provides endpoints for:
- GET /api/cache - Cache statistics
- DELETE /api/cache - Clear all entries (or one with ?key=)
- POST /api/cache/clear - Same as DELETE, for clients that cannot send DELETE
- GET /api/cache/status - Statistics plus background refresh status
- GET /api/cache/warmed-check - Kick off a warm-up and return immediately

Status reads are side-effect free; refresh tasks are registered once at
application startup.
"""

import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request, current_app

from gateboard.api.params import daily_query_from_args

logger = logging.getLogger(__name__)

cache_bp = Blueprint('cache', __name__, url_prefix='/api/cache')


def _cache():
    return current_app.config['FLIGHT_CACHE']


def _clear_response(extra: dict = None):
    key = request.args.get('key') or None
    cleared = _cache().clear(key)

    body = {
        'clearedCount': cleared,
        'message': 'Cache cleared successfully' if key is None else f'Cache entry {key} cleared',
    }
    if extra:
        body.update(extra)
    return jsonify(body)


@cache_bp.route('', methods=['GET'])
def get_cache_stats():
    """Get cache statistics."""
    return jsonify({
        'cache': _cache().stats,
        'message': 'Cache statistics retrieved successfully',
    })


@cache_bp.route('', methods=['DELETE'])
def delete_cache():
    """
    Clear cached flight data.

    Query parameters:
    - key: clear only this cache key (unknown keys clear nothing)
    """
    return _clear_response()


@cache_bp.route('/clear', methods=['POST'])
def clear_cache():
    """Clear cached flight data (POST variant)."""
    return _clear_response({'timestamp': datetime.now(timezone.utc).isoformat()})


@cache_bp.route('/status', methods=['GET'])
def get_cache_status():
    """
    Get cache statistics and background refresh status.

    Returns:
    - cache: entry counts, ages, hit/miss counters
    - backgroundRefresh: registered refresh tasks and their timing
    - inFlight: keys with an upstream fetch currently running
    """
    scheduler = current_app.config.get('REFRESH_SCHEDULER')

    return jsonify({
        'cache': _cache().stats,
        'backgroundRefresh': scheduler.status() if scheduler else [],
        'inFlight': _cache().refresh_status(),
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })


@cache_bp.route('/warmed-check', methods=['GET'])
def warmed_check():
    """
    Ensure the dashboard departures cache is warm without waiting for it.

    Query parameters:
    - airline: airline code (default from REFRESH_AIRLINE)
    - date: schedule date YYYY-MM-DD (default today in Amsterdam)

    Returns 202 with whether a background fetch was started.
    """
    query = daily_query_from_args(request.args)
    started = _cache().ensure_warmed(query.cache_key, query)

    return jsonify({
        'key': query.cache_key,
        'started': started,
        'message': 'Warm-up started' if started else 'Cache already warm or refreshing',
    }), 202
