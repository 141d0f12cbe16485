"""
Exception types raised by GateBoard components.

Upstream failures are recoverable: the cache serves stale data when it
has some, and only surfaces UpstreamUnavailable when it has nothing.
"""

from typing import Any, Dict, Optional


class GateBoardError(Exception):
    """Base exception for GateBoard."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable error body."""
        return {
            'error': self.message,
            'code': self.code,
            'details': self.details,
        }


class UpstreamUnavailable(GateBoardError):
    """
    The flights API could not be reached or returned an error.

    Always retryable: the condition is expected to clear on its own
    (rate limit window, network blip, upstream outage).
    """

    retryable = True

    def __init__(
        self,
        message: str = 'Schiphol API unavailable',
        status_code: Optional[int] = None,
        page: Optional[int] = None,
    ):
        details: Dict[str, Any] = {'retryable': True}
        if status_code is not None:
            details['status_code'] = status_code
        if page is not None:
            details['page'] = page
        super().__init__('UPSTREAM_UNAVAILABLE', message, details)
        self.status_code = status_code
        self.page = page

    def to_dict(self) -> dict:
        body = super().to_dict()
        body['retryable'] = True
        return body
