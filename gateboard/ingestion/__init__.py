"""
Data ingestion module for GateBoard.

Handles calling the Schiphol flights API page by page. The background
refresh scheduler lives in gateboard.ingestion.refresher (it depends on
the cache, which in turn depends on the client exported here).
"""

from gateboard.ingestion.schiphol_client import FlightQuery, PageResult, SchipholClient

__all__ = ['FlightQuery', 'PageResult', 'SchipholClient']
