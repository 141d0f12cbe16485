"""
GateBoard Flask Application.

Main entry point for the web application. Initializes:
- Flight cache (owned by the app, shared by all requests)
- Background refresh scheduler with the dashboard's default task
- API routes

Usage:
    python -m gateboard.app

Or with gunicorn:
    gunicorn 'gateboard.app:create_app()'
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from gateboard.api import cache_bp, flights_bp, metrics_bp
from gateboard.api.params import InvalidQuery
from gateboard.cache import FlightCache
from gateboard.config import config
from gateboard.errors import UpstreamUnavailable
from gateboard.ingestion.refresher import RefreshScheduler
from gateboard.ingestion.schiphol_client import FlightQuery

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)

DASHBOARD_TASK_ID = 'gate-changes-kl-departures'


def create_app(
    cache: Optional[FlightCache] = None,
    start_refresh: bool = True,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        cache: Flight cache to serve from (created from config if None).
               Tests pass an instance wired to a fake client.
        start_refresh: Whether to register the dashboard refresh task and
                       start the background scheduler. Set to False for testing.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    cache = cache or FlightCache()
    app.config['FLIGHT_CACHE'] = cache

    # Register API blueprints
    app.register_blueprint(cache_bp)
    app.register_blueprint(flights_bp)
    app.register_blueprint(metrics_bp)

    if start_refresh:
        scheduler = RefreshScheduler(cache)
        scheduler.register(DASHBOARD_TASK_ID, FlightQuery.daily_departures)
        scheduler.start_background()
        app.config['REFRESH_SCHEDULER'] = scheduler

        logger.info(f'Background refresh started (cache TTL {cache.ttl_seconds}s)')
    else:
        app.config['REFRESH_SCHEDULER'] = None

    if not config.schiphol.is_configured:
        logger.warning('SCHIPHOL_APP_ID / SCHIPHOL_APP_KEY not set. Upstream requests will fail')

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(InvalidQuery)
    def invalid_query(e):
        return jsonify({'error': str(e)}), 400

    @app.errorhandler(UpstreamUnavailable)
    def upstream_unavailable(e):
        logger.warning(f'Upstream unavailable: {e}')
        return jsonify(e.to_dict()), 503

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting GateBoard on http://localhost:{port}')

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug,
        use_reloader=False,  # Reloader would start a second refresh thread
    )


if __name__ == '__main__':
    run_development_server()
