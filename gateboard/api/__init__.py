"""
API module for GateBoard.

Provides REST endpoints for:
- Flight data (cached flight lists, gate changes)
- Dashboard KPIs and system status
- Cache administration (stats, clearing, warm-up)
"""

from gateboard.api.cache import cache_bp
from gateboard.api.flights import flights_bp
from gateboard.api.metrics import metrics_bp

__all__ = ['cache_bp', 'flights_bp', 'metrics_bp']
