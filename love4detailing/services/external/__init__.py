"""
External service module.
"""

from .service import BackendAPIService

__all__ = [
    "BackendAPIService",
]
