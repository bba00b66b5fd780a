"""
Pure pricing functions: size-indexed service prices and travel surcharge.

Distances are in miles, matching how the business quotes its free radius
(17.5 miles from SW9) and its per-mile rate.
"""

from typing import Optional, Sequence

from ...config.pricing import DEFAULT_FREE_RADIUS_MILES, DEFAULT_PER_MILE_RATE, PricingConfig
from ...core.enums import VehicleSize
from ...core.models.pricing import (
    PriceBreakdown,
    PriceLine,
    ServiceCatalogItem,
    miles_to_km,
    round2,
)

AVERAGE_TRAVEL_SPEED_MPH = 30


def service_price(
    item: ServiceCatalogItem,
    size: VehicleSize,
    multiplier: Optional[float] = None,
) -> float:
    """
    Price of a service for a vehicle size.

    The size-indexed column wins. When a service has no positive price for the
    size, the base price is scaled by the size multiplier instead.

    Args:
        item: Catalog entry for the service
        size: Chosen vehicle size
        multiplier: Override for the size multiplier (from the vehicle-sizes endpoint)

    Returns:
        Price in pounds
    """
    column_price = item.prices.price_for(size)
    if column_price is not None and column_price > 0:
        return round2(column_price)

    factor = multiplier if multiplier is not None else size.multiplier
    return round2(item.base_price * factor)


def is_within_free_radius(
    distance_miles: float, free_radius_miles: float = DEFAULT_FREE_RADIUS_MILES
) -> bool:
    """The boundary is inclusive: exactly on the radius travels free."""
    return distance_miles <= free_radius_miles


def travel_surcharge(
    distance_miles: float,
    *,
    free_radius_miles: float = DEFAULT_FREE_RADIUS_MILES,
    per_mile_rate: float = DEFAULT_PER_MILE_RATE,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> float:
    """
    Travel surcharge for a distance from the business base.

    Args:
        distance_miles: Distance from base
        free_radius_miles: Radius within which travel is free
        per_mile_rate: Charge per mile beyond the free radius
        minimum: Optional floor for a non-zero surcharge
        maximum: Optional cap

    Returns:
        Surcharge in pounds, rounded to pennies
    """
    if distance_miles < 0:
        raise ValueError("Distance cannot be negative")

    if is_within_free_radius(distance_miles, free_radius_miles):
        return 0.0

    surcharge = (distance_miles - free_radius_miles) * per_mile_rate
    if minimum is not None:
        surcharge = max(surcharge, minimum)
    if maximum is not None:
        surcharge = min(surcharge, maximum)
    return round2(surcharge)


def calculate_price_breakdown(
    services: Sequence[ServiceCatalogItem],
    size: VehicleSize,
    distance_miles: float,
    *,
    config: Optional[PricingConfig] = None,
    multiplier: Optional[float] = None,
) -> PriceBreakdown:
    """
    Price a selection of services for a vehicle size and travel distance.

    An empty selection is priced at zero plus any surcharge; gating on at
    least one service happens in the booking flow, not here.
    """
    config = config or PricingConfig()

    lines = tuple(
        PriceLine(
            service_id=item.id,
            service_name=item.name,
            price=service_price(item, size, multiplier),
        )
        for item in services
    )
    subtotal = round2(sum(line.price for line in lines))

    within = is_within_free_radius(distance_miles, config.free_radius_miles)
    surcharge = travel_surcharge(
        distance_miles,
        free_radius_miles=config.free_radius_miles,
        per_mile_rate=config.per_mile_rate,
        minimum=config.minimum_surcharge,
        maximum=config.maximum_surcharge,
    )

    return PriceBreakdown.compose(
        service_subtotal=subtotal,
        travel_surcharge=surcharge,
        within_free_radius=within,
        travel_distance_km=round2(miles_to_km(distance_miles)),
        lines=lines,
        source="client",
    )


def format_price(amount: float) -> str:
    """Format an amount for display, e.g. ``£12.50``."""
    return f"£{round2(amount):.2f}"


def describe_travel(breakdown: PriceBreakdown, base_postcode: str = "SW9") -> str:
    miles = breakdown.travel_distance_miles
    if miles is None:
        return "Travel calculation unavailable"
    if breakdown.within_free_radius:
        return f"{miles} miles from {base_postcode} - No travel charge"
    return (
        f"{miles} miles from {base_postcode} - "
        f"{format_price(breakdown.travel_surcharge)} travel charge"
    )


def estimate_duration_minutes(
    service_minutes: int, distance_miles: Optional[float] = None
) -> int:
    """Job duration including the round trip at an average of 30 mph."""
    if not distance_miles:
        return service_minutes
    travel_minutes = round(distance_miles / AVERAGE_TRAVEL_SPEED_MPH * 60 * 2)
    return service_minutes + travel_minutes
