"""
Pricing configuration.
"""

from typing import Optional

from pydantic import BaseModel

from ..core.enums import PricingMode
from .settings import Settings, get_settings

DEFAULT_FREE_RADIUS_MILES = 17.5
DEFAULT_PER_MILE_RATE = 0.50


class PricingConfig(BaseModel):
    """Travel surcharge and pricing source settings."""

    mode: PricingMode = PricingMode.SERVER
    free_radius_miles: float = DEFAULT_FREE_RADIUS_MILES
    per_mile_rate: float = DEFAULT_PER_MILE_RATE
    minimum_surcharge: Optional[float] = None
    maximum_surcharge: Optional[float] = None

    # Business base (SW9, Stockwell/Brixton)
    business_postcode: str = "SW9"
    business_latitude: float = 51.4719
    business_longitude: float = -0.1162

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PricingConfig":
        settings = settings or get_settings()
        return cls(
            mode=settings.pricing_mode,
            free_radius_miles=settings.free_radius_miles,
            per_mile_rate=settings.per_mile_rate,
            minimum_surcharge=settings.surcharge_minimum,
            maximum_surcharge=settings.surcharge_maximum,
            business_postcode=settings.business_postcode,
            business_latitude=settings.business_latitude,
            business_longitude=settings.business_longitude,
        )
