"""
Pricing service module.
"""

from .calculator import (
    calculate_price_breakdown,
    describe_travel,
    estimate_duration_minutes,
    format_price,
    is_within_free_radius,
    service_price,
    travel_surcharge,
)
from .service import PricingService

__all__ = [
    "PricingService",
    "calculate_price_breakdown",
    "describe_travel",
    "estimate_duration_minutes",
    "format_price",
    "is_within_free_radius",
    "service_price",
    "travel_surcharge",
]
