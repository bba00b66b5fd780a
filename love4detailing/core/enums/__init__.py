"""
Enums for the Love4Detailing booking system.
"""

from .booking import (
    BookingStep,
    ErrorKind,
    FlowStatus,
    PricingMode,
    PricingStatus,
    VehicleSize,
)

__all__ = [
    "BookingStep",
    "ErrorKind",
    "FlowStatus",
    "PricingMode",
    "PricingStatus",
    "VehicleSize",
]
