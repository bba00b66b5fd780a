"""
External API-related exceptions.
"""

from typing import Optional


class ExternalAPIError(Exception):
    """Base exception for external API errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class AuthRequiredError(ExternalAPIError):
    """Exception raised when the backend rejects an unauthenticated request."""
    pass


class GeocodingError(ExternalAPIError):
    """Exception raised when a postcode cannot be located."""
    pass
