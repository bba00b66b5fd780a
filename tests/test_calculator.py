import pytest

from love4detailing.config import PricingConfig
from love4detailing.core.enums import VehicleSize
from love4detailing.core.models import ServiceCatalogItem
from love4detailing.services.pricing import (
    calculate_price_breakdown,
    describe_travel,
    estimate_duration_minutes,
    format_price,
    is_within_free_radius,
    service_price,
    travel_surcharge,
)


@pytest.mark.parametrize("distance", [0.0, 1.0, 10.25, 17.49, 17.5])
def test_no_surcharge_inside_free_radius(distance):
    assert is_within_free_radius(distance)
    assert travel_surcharge(distance) == 0


@pytest.mark.parametrize(
    "distance,expected",
    [(17.6, 0.05), (18.5, 0.5), (27.5, 5.0), (37.5, 10.0), (100.0, 41.25)],
)
def test_surcharge_is_linear_beyond_radius(distance, expected):
    assert travel_surcharge(distance) == expected


def test_surcharge_increases_with_distance():
    distances = [18, 19.3, 25, 40, 80]
    charges = [travel_surcharge(d) for d in distances]
    assert charges == sorted(charges)
    assert len(set(charges)) == len(charges)


def test_surcharge_clamps_are_optional():
    assert travel_surcharge(18.0, minimum=5.0) == 5.0
    assert travel_surcharge(200.0, maximum=25.0) == 25.0
    assert travel_surcharge(10.0, minimum=5.0) == 0


def test_negative_distance_rejected():
    with pytest.raises(ValueError):
        travel_surcharge(-1)


def test_service_price_uses_size_column(catalog):
    assert service_price(catalog[0], VehicleSize.MEDIUM) == 40
    assert service_price(catalog[0], VehicleSize.EXTRA_LARGE) == 60


def test_service_price_falls_back_to_base_price_multiplier(catalog):
    # No large column for the interior clean
    assert service_price(catalog[1], VehicleSize.LARGE) == 28.0
    assert service_price(catalog[1], VehicleSize.LARGE, multiplier=1.5) == 30.0


def test_zero_price_column_falls_back():
    item = ServiceCatalogItem(id="x", base_price=10, prices={"medium": 0})
    assert service_price(item, VehicleSize.MEDIUM) == 12.0


def test_single_service_within_radius_costs_forty():
    item = ServiceCatalogItem(id="s1", prices={"medium": 40})
    result = calculate_price_breakdown([item], VehicleSize.MEDIUM, 5.0)
    assert result.service_subtotal == 40
    assert result.travel_surcharge == 0
    assert result.total == 40
    assert result.within_free_radius


def test_single_service_twenty_miles_beyond_radius():
    item = ServiceCatalogItem(id="s1", prices={"medium": 40})
    result = calculate_price_breakdown(
        [item], VehicleSize.MEDIUM, 37.5, config=PricingConfig(per_mile_rate=0.50)
    )
    assert result.service_subtotal == 40
    assert result.travel_surcharge == 10.00
    assert result.total == 50.00
    assert not result.within_free_radius


def test_zero_services_prices_at_zero():
    result = calculate_price_breakdown([], VehicleSize.SMALL, 3.0)
    assert result.service_subtotal == 0
    assert result.total == 0
    assert result.lines == ()


def test_total_is_subtotal_plus_surcharge(catalog):
    for size in VehicleSize:
        for distance in (0, 17.5, 21.13, 55.55):
            result = calculate_price_breakdown(catalog, size, distance)
            assert result.total == round(result.service_subtotal + result.travel_surcharge, 2)


def test_display_helpers(catalog):
    result = calculate_price_breakdown(catalog[:1], VehicleSize.MEDIUM, 27.5)
    assert format_price(12.5) == "£12.50"
    assert describe_travel(result) == "27.5 miles from SW9 - £5.00 travel charge"

    free = calculate_price_breakdown(catalog[:1], VehicleSize.MEDIUM, 2.0)
    assert describe_travel(free).endswith("No travel charge")


def test_estimate_duration_adds_round_trip():
    assert estimate_duration_minutes(120) == 120
    # 15 miles each way at 30 mph
    assert estimate_duration_minutes(120, 15) == 180
