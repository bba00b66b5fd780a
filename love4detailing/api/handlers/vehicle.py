"""
Vehicle size handler.
"""

from fastapi import APIRouter, Query

from ...utils.vehicle import VehicleSizeDetector


class VehicleHandler:
    """Handler for vehicle size helpers."""

    def __init__(self):
        self.detector = VehicleSizeDetector()
        self.router = APIRouter()
        self._setup_routes()

    def _setup_routes(self):
        @self.router.get("/suggest")
        async def suggest_size(make: str = Query(""), model: str = Query("")):
            """Suggest a vehicle size from make and model keywords."""
            size = self.detector.suggest_size(make, model)
            return {
                "size": size.value,
                "label": size.label,
                "price_column": size.price_column,
            }
