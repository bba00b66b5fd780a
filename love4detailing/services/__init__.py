"""
Service layer for the Love4Detailing booking system.
"""

from .external import BackendAPIService
from .distance import DistanceService
from .pricing import PricingService
from .booking import BookingFlow, BookingService
from .memory import FlowStateManager

__all__ = [
    "BackendAPIService",
    "DistanceService",
    "PricingService",
    "BookingFlow",
    "BookingService",
    "FlowStateManager",
]
