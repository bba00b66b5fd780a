"""
Booking service module.
"""

from .flow import BookingFlow
from .service import BookingService
from .steps import STEP_DEFINITIONS, StepDefinition

__all__ = [
    "BookingFlow",
    "BookingService",
    "STEP_DEFINITIONS",
    "StepDefinition",
]
