"""
External API configuration.
"""

from typing import Dict, Optional

from pydantic import BaseModel

from .settings import Settings, get_settings


class ExternalAPIConfig(BaseModel):
    """External API configuration settings."""

    # Hosted backend
    backend_base_url: str = "http://localhost:3000/api"
    backend_api_token: Optional[str] = None
    backend_timeout: float = 10.0

    # postcodes.io
    postcodes_base_url: str = "https://api.postcodes.io"
    geocoding_timeout: float = 5.0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ExternalAPIConfig":
        settings = settings or get_settings()
        return cls(
            backend_base_url=settings.backend_api_base,
            backend_api_token=settings.backend_api_token,
            backend_timeout=settings.backend_timeout,
            postcodes_base_url=settings.postcodes_api_base,
            geocoding_timeout=settings.geocoding_timeout,
        )

    def backend_url(self, path: str) -> str:
        """Join an endpoint path onto the backend base URL."""
        return f"{self.backend_base_url.rstrip('/')}/{path.lstrip('/')}"

    def postcode_lookup_url(self, postcode: str) -> str:
        """Get the postcodes.io lookup URL for a postcode."""
        compact = postcode.replace(" ", "").upper()
        return f"{self.postcodes_base_url.rstrip('/')}/postcodes/{compact}"

    def backend_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.backend_api_token:
            headers["Authorization"] = f"Bearer {self.backend_api_token}"
        return headers

    def is_backend_configured(self) -> bool:
        """Check if the hosted backend is configured."""
        return bool(self.backend_base_url)
