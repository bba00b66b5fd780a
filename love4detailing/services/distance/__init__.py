"""
Distance service module.
"""

from .service import DistanceService

__all__ = [
    "DistanceService",
]
