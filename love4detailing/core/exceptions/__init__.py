"""
Custom exceptions for the Love4Detailing booking system.
"""

from .booking import BookingFlowError, BookingValidationError, SlotUnavailableError
from .external import AuthRequiredError, ExternalAPIError, GeocodingError
from .pricing import PricingError

__all__ = [
    "BookingFlowError",
    "BookingValidationError",
    "SlotUnavailableError",
    "ExternalAPIError",
    "AuthRequiredError",
    "GeocodingError",
    "PricingError",
]
