"""
Amsterdam time helpers.

The Schiphol API publishes schedule times in Amsterdam local time, and
"today" for the dashboard means today in Amsterdam regardless of where
the server runs.
"""

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

AMSTERDAM = ZoneInfo('Europe/Amsterdam')


def now_amsterdam() -> datetime:
    """Current time in Amsterdam (timezone-aware)."""
    return datetime.now(timezone.utc).astimezone(AMSTERDAM)


def today_amsterdam(now: Optional[datetime] = None) -> str:
    """Today's date in Amsterdam as YYYY-MM-DD."""
    now = now or now_amsterdam()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(AMSTERDAM).date().isoformat()


def local_hour(dt: datetime) -> int:
    """Hour of day in Amsterdam for an aware datetime (naive is taken as Amsterdam)."""
    if dt.tzinfo is None:
        return dt.hour
    return dt.astimezone(AMSTERDAM).hour
