"""
Core data models for the Love4Detailing booking system.
"""

from .pricing import (
    PriceBreakdown,
    PriceLine,
    PriceQuote,
    ServiceCatalogItem,
    SizePriceTable,
    VehicleSizeCategory,
    km_to_miles,
    miles_to_km,
    round2,
)
from .booking import (
    PRICING_FIELDS,
    AddressDetails,
    BookingDraft,
    ContactDetails,
    ScheduleSelection,
    StepError,
    VehicleDetails,
)
from .customer import AuthUser, BookingConfirmation

__all__ = [
    "PriceBreakdown",
    "PriceLine",
    "PriceQuote",
    "ServiceCatalogItem",
    "SizePriceTable",
    "VehicleSizeCategory",
    "km_to_miles",
    "miles_to_km",
    "round2",
    "PRICING_FIELDS",
    "AddressDetails",
    "BookingDraft",
    "ContactDetails",
    "ScheduleSelection",
    "StepError",
    "VehicleDetails",
    "AuthUser",
    "BookingConfirmation",
]
