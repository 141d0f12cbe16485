"""
Configuration management for GateBoard.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class SchipholConfig:
    """Schiphol public flights API configuration."""
    app_id: Optional[str] = os.getenv('SCHIPHOL_APP_ID') or None
    app_key: Optional[str] = os.getenv('SCHIPHOL_APP_KEY') or None
    base_url: str = os.getenv('SCHIPHOL_BASE_URL', 'https://api.schiphol.nl/public-flights')
    resource_version: str = 'v4'

    # Applied to every page request; a timeout counts as a failed page
    page_timeout_seconds: float = float(os.getenv('SCHIPHOL_PAGE_TIMEOUT_SECONDS', '10'))
    page_delay_seconds: float = float(os.getenv('SCHIPHOL_PAGE_DELAY_SECONDS', '0.1'))
    max_pages: int = 50  # Safety limit, pagination normally ends on an empty page

    @property
    def is_configured(self) -> bool:
        return bool(self.app_id and self.app_key)


@dataclass(frozen=True)
class CacheConfig:
    """In-memory flight cache settings."""
    ttl_seconds: int = int(os.getenv('CACHE_TTL_SECONDS', '600'))
    # Partial (truncated) entries are served for this long before a refetch
    partial_retry_seconds: int = int(os.getenv('CACHE_PARTIAL_RETRY_SECONDS', '60'))


@dataclass(frozen=True)
class RefreshConfig:
    """Background refresh scheduler settings."""
    check_interval_seconds: int = int(os.getenv('REFRESH_CHECK_INTERVAL_SECONDS', '30'))
    lead_seconds: int = int(os.getenv('REFRESH_LEAD_SECONDS', '60'))
    retry_seconds: int = int(os.getenv('REFRESH_RETRY_SECONDS', '60'))
    max_pages: int = int(os.getenv('REFRESH_MAX_PAGES', '50'))
    airline: str = os.getenv('REFRESH_AIRLINE', 'KL')


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    schiphol: SchipholConfig
    cache: CacheConfig
    refresh: RefreshConfig

    # Flask settings
    secret_key: str
    debug: bool


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        schiphol=SchipholConfig(),
        cache=CacheConfig(),
        refresh=RefreshConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
