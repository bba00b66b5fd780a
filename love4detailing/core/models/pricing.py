"""
Pricing and catalog data models.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..enums import VehicleSize

KM_PER_MILE = 1.609344


def round2(value: float) -> float:
    """Round a money amount to pennies, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def km_to_miles(km: float) -> float:
    return km / KM_PER_MILE


def miles_to_km(miles: float) -> float:
    return miles * KM_PER_MILE


class SizePriceTable(BaseModel):
    """Per-vehicle-size prices for a single service."""

    model_config = ConfigDict(extra="ignore")

    small: Optional[float] = None
    medium: Optional[float] = None
    large: Optional[float] = None
    extra_large: Optional[float] = None

    def price_for(self, size: VehicleSize) -> Optional[float]:
        return getattr(self, size.price_column)


class ServiceCatalogItem(BaseModel):
    """Detailing service as returned by the catalog endpoint."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    name: str = ""
    description: Optional[str] = None
    category: Optional[str] = None
    base_price: float = Field(
        default=0.0, validation_alias=AliasChoices("base_price", "basePrice")
    )
    duration_minutes: int = Field(
        default=0,
        validation_alias=AliasChoices(
            "duration_minutes", "durationMinutes", "estimated_duration", "duration"
        ),
    )
    prices: SizePriceTable = Field(
        default_factory=SizePriceTable,
        validation_alias=AliasChoices("prices", "pricing", "service_pricing"),
    )


class VehicleSizeCategory(BaseModel):
    """Vehicle size category with example vehicles."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    code: VehicleSize = Field(validation_alias=AliasChoices("code", "size"))
    name: str = ""
    description: Optional[str] = None
    examples: List[str] = Field(default_factory=list)
    price_multiplier: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("price_multiplier", "priceMultiplier")
    )


@dataclass(frozen=True)
class PriceLine:
    """Price of one selected service for the chosen vehicle size."""

    service_id: str
    service_name: str
    price: float


@dataclass(frozen=True)
class PriceBreakdown:
    """Derived price for a draft. Never mutated; recomputed on input changes."""

    service_subtotal: float
    travel_surcharge: float
    total: float
    within_free_radius: bool
    travel_distance_km: Optional[float] = None
    lines: Tuple[PriceLine, ...] = ()
    source: str = "server"

    def __post_init__(self) -> None:
        if self.within_free_radius and self.travel_surcharge != 0:
            raise ValueError("Travel surcharge must be zero inside the free radius")
        if self.total != round2(self.service_subtotal + self.travel_surcharge):
            raise ValueError("Total must equal service subtotal plus travel surcharge")

    @classmethod
    def compose(
        cls,
        *,
        service_subtotal: float,
        travel_surcharge: float,
        within_free_radius: bool,
        travel_distance_km: Optional[float] = None,
        lines: Tuple[PriceLine, ...] = (),
        source: str = "server",
    ) -> "PriceBreakdown":
        """Build a breakdown, deriving the total from its parts."""
        subtotal = round2(service_subtotal)
        surcharge = 0.0 if within_free_radius else round2(travel_surcharge)
        return cls(
            service_subtotal=subtotal,
            travel_surcharge=surcharge,
            total=round2(subtotal + surcharge),
            within_free_radius=within_free_radius,
            travel_distance_km=travel_distance_km,
            lines=tuple(lines),
            source=source,
        )

    @property
    def travel_distance_miles(self) -> Optional[float]:
        if self.travel_distance_km is None:
            return None
        return round2(km_to_miles(self.travel_distance_km))

    def to_dict(self) -> dict:
        return {
            "service_subtotal": self.service_subtotal,
            "travel_surcharge": self.travel_surcharge,
            "total": self.total,
            "within_free_radius": self.within_free_radius,
            "travel_distance_km": self.travel_distance_km,
            "travel_distance_miles": self.travel_distance_miles,
            "lines": [
                {"service_id": line.service_id, "service_name": line.service_name, "price": line.price}
                for line in self.lines
            ],
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PriceBreakdown":
        return cls.compose(
            service_subtotal=data["service_subtotal"],
            travel_surcharge=data["travel_surcharge"],
            within_free_radius=data["within_free_radius"],
            travel_distance_km=data.get("travel_distance_km"),
            lines=tuple(PriceLine(**line) for line in data.get("lines", [])),
            source=data.get("source", "server"),
        )


@dataclass(frozen=True)
class PriceQuote:
    """Authoritative breakdown plus an optional client-side estimate."""

    breakdown: PriceBreakdown
    estimate: Optional[PriceBreakdown] = None
    discrepancy: bool = False
