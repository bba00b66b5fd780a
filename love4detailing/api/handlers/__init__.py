"""
API handler modules.
"""

from .flow import FlowHandler
from .health import HealthHandler
from .vehicle import VehicleHandler

__all__ = [
    "FlowHandler",
    "HealthHandler",
    "VehicleHandler",
]
