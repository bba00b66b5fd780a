"""
Utility modules for the Love4Detailing booking system.
"""

from .logging import configure_logging, get_logger
from .validation import ValidationUtils
from .vehicle import VehicleSizeDetector

__all__ = [
    "configure_logging",
    "get_logger",
    "ValidationUtils",
    "VehicleSizeDetector",
]
