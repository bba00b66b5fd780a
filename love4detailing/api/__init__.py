"""
HTTP API for the booking flow.
"""

from .app import create_app

__all__ = ["create_app"]
