"""
Distance service: straight-line distance from the business base to a postcode.
"""

import math
from typing import Dict, Optional, Tuple

import httpx

from ...config import ExternalAPIConfig, PricingConfig
from ...core.exceptions import GeocodingError
from ...core.models import km_to_miles, round2
from ...utils.logging import get_logger
from ...utils.validation import ValidationUtils

logger = get_logger("love4detailing.distance")

EARTH_RADIUS_KM = 6371.0

Coordinates = Tuple[float, float]


class DistanceService:
    """Resolve postcodes to coordinates and measure distance from the base."""

    # Fallback coordinates for common London postcodes
    KNOWN_POSTCODES: Dict[str, Coordinates] = {
        # Central London
        "SW1A 1AA": (51.5014, -0.1419),
        "EC1A 1BB": (51.5174, -0.0930),
        "W1A 0AX": (51.5154, -0.1447),
        # South London
        "SW8 1DT": (51.4875, -0.1687),
        "SE1 1PB": (51.4754, -0.0638),
        "SW2 1AD": (51.4552, -0.1756),
        # North London
        "N1 1AA": (51.5514, -0.1167),
        "N19 3DL": (51.5656, -0.2126),
        # East London
        "E1 1AA": (51.5099, -0.0059),
        "E14 5AB": (51.5254, 0.0417),
        # West London
        "W2 1DT": (51.5074, -0.2297),
        "SW7 1AA": (51.4924, -0.1615),
        # Outer London
        "CR0 1AA": (51.3791, -0.0648),
        "UB1 1AA": (51.5046, -0.4804),
        "RM1 1AA": (51.5755, 0.1426),
        "KT1 1AA": (51.4085, -0.3064),
    }

    def __init__(
        self,
        config: Optional[ExternalAPIConfig] = None,
        pricing: Optional[PricingConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ExternalAPIConfig.from_settings()
        self.pricing = pricing or PricingConfig.from_settings()
        self._transport = transport
        self._cache: Dict[str, Coordinates] = {}

    @staticmethod
    def haversine_km(origin: Coordinates, destination: Coordinates) -> float:
        """Great-circle distance between two (lat, lon) points in kilometers."""
        lat1, lon1 = map(math.radians, origin)
        lat2, lon2 = map(math.radians, destination)
        d_lat = lat2 - lat1
        d_lon = lon2 - lon1

        a = (
            math.sin(d_lat / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
        )
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        return EARTH_RADIUS_KM * c

    @property
    def base_coordinates(self) -> Coordinates:
        return (self.pricing.business_latitude, self.pricing.business_longitude)

    async def lookup_coordinates(self, postcode: str) -> Coordinates:
        """
        Resolve a postcode to coordinates.

        Order: cache, known postcodes, postcodes.io, then the first known
        postcode sharing the outward code.

        Raises:
            GeocodingError: If the postcode is malformed or cannot be located
        """
        is_valid, error = ValidationUtils.validate_uk_postcode(postcode)
        if not is_valid:
            raise GeocodingError(error)

        normalized = ValidationUtils.normalize_uk_postcode(postcode)
        if normalized in self._cache:
            return self._cache[normalized]

        coordinates = self.KNOWN_POSTCODES.get(normalized)
        if coordinates is None:
            coordinates = await self._fetch_coordinates(normalized)
        if coordinates is None:
            coordinates = self._match_outward_code(normalized)
        if coordinates is None:
            raise GeocodingError(f"Unable to locate postcode {normalized}")

        self._cache[normalized] = coordinates
        return coordinates

    async def _fetch_coordinates(self, postcode: str) -> Optional[Coordinates]:
        url = self.config.postcode_lookup_url(postcode)
        try:
            async with httpx.AsyncClient(
                timeout=self.config.geocoding_timeout, transport=self._transport
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"postcode lookup failed for {postcode}: {e}")
            return None

        if response.status_code != 200:
            logger.info(f"postcode lookup status={response.status_code} for {postcode}")
            return None

        try:
            result = response.json().get("result") or {}
            return (float(result["latitude"]), float(result["longitude"]))
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.warning(f"postcode lookup returned malformed data for {postcode}")
            return None

    def _match_outward_code(self, postcode: str) -> Optional[Coordinates]:
        outward = ValidationUtils.outward_code(postcode)
        for known, coordinates in self.KNOWN_POSTCODES.items():
            if known.split(" ")[0] == outward:
                return coordinates
        return None

    async def distance_from_base_miles(self, postcode: str) -> float:
        """Distance in miles from the business base, rounded to 2 decimals."""
        coordinates = await self.lookup_coordinates(postcode)
        km = self.haversine_km(self.base_coordinates, coordinates)
        miles = round2(km_to_miles(km))
        logger.debug(f"distance {postcode}: {miles} miles")
        return miles
