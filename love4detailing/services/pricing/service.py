"""
Pricing service: fetches authoritative quotes and optional client estimates.
"""

from typing import Any, Dict, List, Optional, Sequence

from ...config import PricingConfig
from ...core.enums import PricingMode, VehicleSize
from ...core.exceptions import ExternalAPIError, PricingError
from ...core.models import (
    PriceBreakdown,
    PriceLine,
    PriceQuote,
    ServiceCatalogItem,
    VehicleSizeCategory,
    km_to_miles,
)
from ...utils.logging import get_logger
from ..distance import DistanceService
from ..external import BackendAPIService
from .calculator import calculate_price_breakdown, is_within_free_radius

logger = get_logger("love4detailing.pricing")

# Differences below a penny are rounding noise
DISCREPANCY_TOLERANCE = 0.01


class PricingService:
    """Service for pricing a booking selection."""

    def __init__(
        self,
        backend: BackendAPIService,
        distance: Optional[DistanceService] = None,
        config: Optional[PricingConfig] = None,
    ):
        self.backend = backend
        self.distance = distance
        self.config = config or PricingConfig.from_settings()
        self._catalog: Dict[str, ServiceCatalogItem] = {}
        self._vehicle_sizes: Dict[VehicleSize, VehicleSizeCategory] = {}

    async def load_catalog(self, refresh: bool = False) -> List[ServiceCatalogItem]:
        """Load and cache the service catalog."""
        if refresh or not self._catalog:
            services = await self.backend.get_services()
            self._catalog = {item.id: item for item in services}
        return list(self._catalog.values())

    async def load_vehicle_sizes(self, refresh: bool = False) -> List[VehicleSizeCategory]:
        """Load and cache vehicle size categories."""
        if refresh or not self._vehicle_sizes:
            sizes = await self.backend.get_vehicle_sizes()
            self._vehicle_sizes = {category.code: category for category in sizes}
        return list(self._vehicle_sizes.values())

    def map_server_summary(self, data: Dict[str, Any]) -> PriceBreakdown:
        """
        Map a ``/pricing/calculate`` response onto a PriceBreakdown.

        Per-service calculations may include the distance surcharge in their
        ``totalPrice``; the subtotal is rebuilt from service prices only so the
        surcharge is never counted twice.

        Raises:
            PricingError: If the response carries no usable amounts
        """
        summary = data.get("summary") or {}
        calculations = summary.get("calculations") or data.get("calculations") or []

        try:
            surcharge = float(
                summary.get("totalDistanceSurcharge")
                or summary.get("distanceSurcharge")
                or 0
            )
            lines = tuple(self._server_line(calc) for calc in calculations)
            if lines:
                subtotal = sum(line.price for line in lines)
            elif summary.get("totalPrice") is not None:
                subtotal = float(summary["totalPrice"]) - surcharge
            else:
                raise PricingError("Pricing response has no totals")
            distance_km = summary.get("distanceKm")
            distance_km = float(distance_km) if distance_km is not None else None
        except (TypeError, ValueError) as e:
            raise PricingError(f"Malformed pricing response: {e}")

        if distance_km is not None:
            within = is_within_free_radius(
                km_to_miles(distance_km), self.config.free_radius_miles
            ) and surcharge == 0
        else:
            within = surcharge == 0

        return PriceBreakdown.compose(
            service_subtotal=subtotal,
            travel_surcharge=surcharge,
            within_free_radius=within,
            travel_distance_km=distance_km,
            lines=lines,
            source="server",
        )

    @staticmethod
    def _server_line(calc: Dict[str, Any]) -> PriceLine:
        if calc.get("subtotal") is not None:
            price = float(calc["subtotal"])
        else:
            price = float(calc.get("totalPrice") or 0)
            calc_surcharge = calc.get("distanceSurcharge")
            if calc_surcharge is not None:
                price -= float(calc_surcharge)
        return PriceLine(
            service_id=str(calc.get("serviceId") or ""),
            service_name=calc.get("serviceName") or "",
            price=price,
        )

    async def server_quote(
        self, service_ids: Sequence[str], size: VehicleSize, postcode: str
    ) -> PriceBreakdown:
        """Authoritative price from the backend."""
        category = self._vehicle_sizes.get(size)
        data = await self.backend.calculate_pricing(
            list(service_ids),
            size,
            postcode,
            vehicle_size_id=category.id if category else None,
        )
        return self.map_server_summary(data)

    async def client_quote(
        self, service_ids: Sequence[str], size: VehicleSize, postcode: str
    ) -> PriceBreakdown:
        """Display estimate computed locally from the catalog and distance lookup."""
        if self.distance is None:
            raise PricingError("Client pricing requires a distance service")

        await self.load_catalog()
        missing = [sid for sid in service_ids if sid not in self._catalog]
        if missing:
            raise PricingError(f"Unknown services: {', '.join(missing)}")

        distance_miles = await self.distance.distance_from_base_miles(postcode)
        category = self._vehicle_sizes.get(size)
        return calculate_price_breakdown(
            [self._catalog[sid] for sid in service_ids],
            size,
            distance_miles,
            config=self.config,
            multiplier=category.price_multiplier if category else None,
        )

    async def quote(
        self, service_ids: Sequence[str], size: VehicleSize, postcode: str
    ) -> PriceQuote:
        """
        Price a selection according to the configured pricing mode.

        In ``both`` mode the server figure is shown and the client estimate is
        only compared against it; a failed estimate never blocks the quote.
        """
        logger.info(
            f"pricing request mode={self.config.mode.value} services={len(service_ids)} "
            f"size={size.value} postcode={postcode}"
        )

        if self.config.mode is PricingMode.CLIENT:
            return PriceQuote(breakdown=await self.client_quote(service_ids, size, postcode))

        breakdown = await self.server_quote(service_ids, size, postcode)
        if self.config.mode is PricingMode.SERVER:
            return PriceQuote(breakdown=breakdown)

        try:
            estimate = await self.client_quote(service_ids, size, postcode)
        except (PricingError, ExternalAPIError) as e:
            logger.warning(f"client estimate unavailable: {e}")
            return PriceQuote(breakdown=breakdown)

        discrepancy = abs(estimate.total - breakdown.total) > DISCREPANCY_TOLERANCE
        if discrepancy:
            logger.warning(
                f"pricing discrepancy: server={breakdown.total} client={estimate.total} "
                f"services={list(service_ids)} size={size.value} postcode={postcode}"
            )
        return PriceQuote(breakdown=breakdown, estimate=estimate, discrepancy=discrepancy)
