"""
Pytest configuration and fixtures.
"""

import pytest
from unittest.mock import Mock, AsyncMock

from love4detailing.config import PricingConfig
from love4detailing.core.enums import PricingMode, VehicleSize
from love4detailing.core.models import (
    AddressDetails,
    BookingConfirmation,
    BookingDraft,
    ContactDetails,
    PriceBreakdown,
    PriceQuote,
    ScheduleSelection,
    ServiceCatalogItem,
    VehicleDetails,
)
from love4detailing.services.booking import BookingFlow, BookingService
from love4detailing.services.distance import DistanceService
from love4detailing.services.external import BackendAPIService
from love4detailing.services.pricing import PricingService


def breakdown(subtotal: float, surcharge: float = 0.0, source: str = "server") -> PriceBreakdown:
    return PriceBreakdown.compose(
        service_subtotal=subtotal,
        travel_surcharge=surcharge,
        within_free_radius=surcharge == 0,
        source=source,
    )


@pytest.fixture
def catalog():
    """Two catalog services with per-size prices."""
    return [
        ServiceCatalogItem(
            id="s1",
            name="Full Valet",
            base_price=30.0,
            duration_minutes=120,
            prices={"small": 35, "medium": 40, "large": 50, "extra_large": 60},
        ),
        ServiceCatalogItem(
            id="s2",
            name="Interior Clean",
            base_price=20.0,
            duration_minutes=60,
            prices={"small": 20, "medium": 25},
        ),
    ]


@pytest.fixture
def pricing_config():
    return PricingConfig(mode=PricingMode.SERVER)


@pytest.fixture
def mock_pricing():
    """Mock pricing service returning a £40 quote."""
    pricing = Mock(spec=PricingService)
    pricing.quote = AsyncMock(return_value=PriceQuote(breakdown=breakdown(40.0)))
    return pricing


@pytest.fixture
def mock_backend(catalog):
    """Mock backend API service."""
    backend = Mock(spec=BackendAPIService)
    backend.get_services = AsyncMock(return_value=catalog)
    backend.get_vehicle_sizes = AsyncMock(return_value=[])
    backend.calculate_pricing = AsyncMock(
        return_value={"summary": {"totalPrice": 40, "totalDistanceSurcharge": 0, "distanceKm": 5.0}}
    )
    backend.create_booking = AsyncMock(
        return_value=BookingConfirmation(booking_reference="L4D-1001", booking_id="b1")
    )
    backend.get_auth_user = AsyncMock(return_value=None)
    backend.get_customer_booking = AsyncMock(return_value={})
    return backend


@pytest.fixture
def mock_distance():
    distance = Mock(spec=DistanceService)
    distance.distance_from_base_miles = AsyncMock(return_value=5.0)
    return distance


@pytest.fixture
def booking_service(mock_backend):
    return BookingService(mock_backend)


@pytest.fixture
def flow(mock_pricing, booking_service):
    """Fresh booking flow with mocked pricing."""
    return BookingFlow(mock_pricing, booking_service, session_id="test-session")


@pytest.fixture
def complete_draft():
    """A draft where every step validates and the price is known."""
    return BookingDraft(
        selected_service_ids=("s1",),
        vehicle=VehicleDetails(make="Ford", model="Focus", year=2019, size=VehicleSize.MEDIUM),
        address=AddressDetails(line1="1 Acre Lane", city="London", postcode="SW2 1AD"),
        schedule=ScheduleSelection(scheduled_date="2025-06-02", time_slot_id="slot-9", start_time="09:00"),
        contact=ContactDetails(name="Sam Taylor", email="sam@example.com", phone="07700 900123"),
        pricing=breakdown(40.0),
    )


async def fill_flow(flow: BookingFlow) -> BookingFlow:
    """Walk a flow to the review step with valid data."""
    await flow.update_field("selected_service_ids", ["s1"])
    assert flow.go_next()
    await flow.update_field("vehicle.make", "Ford")
    await flow.update_field("vehicle.model", "Focus")
    await flow.update_field("vehicle.size", "M")
    assert flow.go_next()
    await flow.update_field("address.line1", "1 Acre Lane")
    await flow.update_field("address.city", "London")
    await flow.update_field("address.postcode", "sw2 1ad")
    assert flow.go_next()
    await flow.update_field("schedule.scheduled_date", "2025-06-02")
    await flow.update_field("schedule.time_slot_id", "slot-9")
    assert flow.go_next()
    await flow.update_field("contact.name", "Sam Taylor")
    await flow.update_field("contact.email", "sam@example.com")
    await flow.update_field("contact.phone", "07700 900123")
    return flow


@pytest.fixture
def fill():
    """Helper that walks a flow to the review step."""
    return fill_flow
