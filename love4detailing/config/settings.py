"""
Application settings and configuration.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.enums import PricingMode


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Love4Detailing Booking"
    app_version: str = "1.0.0"
    debug: bool = False
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Hosted backend (auth, bookings, catalog)
    backend_api_base: str = "http://localhost:3000/api"
    backend_api_token: Optional[str] = None
    backend_timeout: float = 10.0

    # Postcode geocoding
    postcodes_api_base: str = "https://api.postcodes.io"
    geocoding_timeout: float = 5.0

    # Pricing
    pricing_mode: PricingMode = PricingMode.SERVER
    free_radius_miles: float = 17.5
    per_mile_rate: float = 0.50
    surcharge_minimum: Optional[float] = None
    surcharge_maximum: Optional[float] = None
    business_postcode: str = "SW9"
    business_latitude: float = 51.4719
    business_longitude: float = -0.1162

    # Draft persistence
    persist_drafts: bool = True
    state_db_path: str = "booking_state.db"
    session_expiry_seconds: int = 30 * 60

    # Logging
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
