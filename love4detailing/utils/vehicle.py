"""
Vehicle size suggestion from make and model.
"""

import re

from ..core.enums import VehicleSize


class VehicleSizeDetector:
    """Keyword-based vehicle size detection used to pre-select a size."""

    SMALL_KEYWORDS = (
        "mini",
        "smart",
        "fiat 500",
        "toyota aygo",
        "ford ka",
        "citroen c1",
        "peugeot 108",
        "hyundai i10",
        "volkswagen up",
    )

    LARGE_KEYWORDS = (
        "range rover",
        "bmw x5",
        "bmw x6",
        "bmw x7",
        "audi q7",
        "audi q8",
        "mercedes gle",
        "mercedes gls",
        "mercedes g-class",
        "volvo xc90",
        "porsche cayenne",
        "estate",
        "touring",
    )

    EXTRA_LARGE_KEYWORDS = (
        "van",
        "transit",
        "sprinter",
        "mercedes v-class",
        "volkswagen crafter",
        "iveco daily",
        "bentley",
        "rolls royce",
        "ferrari",
        "lamborghini",
        "maserati",
        "aston martin",
    )

    @staticmethod
    def _has_keyword(text: str, keywords) -> bool:
        # Whole words only, so "Gemini" is not a Mini and "Vanquish" is not a van
        return any(re.search(rf"\b{re.escape(k)}\b", text) for k in keywords)

    @classmethod
    def suggest_size(cls, make: str, model: str) -> VehicleSize:
        """
        Suggest a vehicle size for a make and model.

        Args:
            make: Vehicle make, e.g. "Ford"
            model: Vehicle model, e.g. "Transit"

        Returns:
            Suggested VehicleSize; MEDIUM when nothing matches
        """
        model_lower = (model or "").lower()
        make_model = f"{make or ''} {model or ''}".lower()

        if cls._has_keyword(make_model, cls.SMALL_KEYWORDS) or cls._has_keyword(
            model_lower, ("hatchback",)
        ):
            return VehicleSize.SMALL

        if cls._has_keyword(make_model, cls.LARGE_KEYWORDS) or cls._has_keyword(
            model_lower, ("suv", "4x4")
        ):
            return VehicleSize.LARGE

        if cls._has_keyword(make_model, cls.EXTRA_LARGE_KEYWORDS):
            return VehicleSize.EXTRA_LARGE

        return VehicleSize.MEDIUM
