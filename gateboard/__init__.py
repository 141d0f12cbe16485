"""
GateBoard Backend Package.

Schiphol departures dashboard backend built with Flask, requests and NumPy.

Modules:
    api/          REST endpoints for flights, KPIs and cache administration
    models/       Immutable flight records parsed from the Schiphol API
    ingestion/    Schiphol API client and background cache refresh
    analytics/    Flight filters, delay KPIs and gate-change detection
    cache.py      Thread-safe fetch-and-cache gateway with request coalescing
    config.py     Centralized configuration from environment variables
    errors.py     Exception types (UpstreamUnavailable)
    timeutils.py  Amsterdam date/time helpers
"""

__version__ = '1.0.0'
