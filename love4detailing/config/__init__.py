"""
Configuration management for the Love4Detailing booking system.
"""

from .settings import Settings, get_settings
from .database import DatabaseConfig
from .external_apis import ExternalAPIConfig
from .pricing import DEFAULT_FREE_RADIUS_MILES, DEFAULT_PER_MILE_RATE, PricingConfig

__all__ = [
    "Settings",
    "get_settings",
    "DatabaseConfig",
    "ExternalAPIConfig",
    "PricingConfig",
    "DEFAULT_FREE_RADIUS_MILES",
    "DEFAULT_PER_MILE_RATE",
]
