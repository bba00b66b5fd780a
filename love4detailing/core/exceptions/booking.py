"""
Booking-related exceptions.
"""

from typing import Dict, Optional


class BookingFlowError(Exception):
    """Base exception for booking flow errors."""
    pass


class BookingValidationError(BookingFlowError):
    """Exception raised when booking validation fails."""

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.field_errors: Dict[str, str] = dict(field_errors or {})


class SlotUnavailableError(BookingFlowError):
    """Exception raised when a booking slot is no longer available."""
    pass
