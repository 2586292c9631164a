from decimal import Decimal
from typing import Optional

import pytest

from app.api.delivery.adapters.cache_adapter import CacheAdapter
from app.api.delivery.contracts.routing_contract import (
    GeocodeResult,
    IGeocodingProvider,
    IRouteProvider,
    RouteResult,
)
from app.api.delivery.core.delivery_fee import (
    AddressValidationError,
    CityNotServiceableError,
    DeliveryAddress,
    DeliveryFeeConfig,
    DeliveryFeeEstimator,
    DeliveryProviderError,
    OutOfRangeError,
    compute_fee,
    round_km,
)
from app.api.delivery.models.coordinates import Coordinates

CONFIG = DeliveryFeeConfig()
PIN = Coordinates(lat=14.98, lng=120.54)


class FakeMaps(IGeocodingProvider, IRouteProvider):
    def __init__(self, distance_meters: Optional[int] = 2500, found: bool = True):
        self.distance_meters = distance_meters
        self.found = found
        self.geocode_calls = 0
        self.route_calls = 0

    def geocode(self, address: str) -> Optional[GeocodeResult]:
        self.geocode_calls += 1
        if not self.found:
            return None
        return GeocodeResult(coords=PIN, formatted_address=address)

    def driving_route(self, origin: Coordinates, destination: Coordinates) -> Optional[RouteResult]:
        self.route_calls += 1
        if self.distance_meters is None:
            return None
        return RouteResult(distance_meters=self.distance_meters, encoded_polyline="abc")


def estimator(maps: FakeMaps) -> DeliveryFeeEstimator:
    return DeliveryFeeEstimator(CONFIG, geocoder=maps, router=maps, cache=CacheAdapter())


@pytest.mark.parametrize(
    "km, fee",
    [("2.5", "39"), ("3", "39"), ("3.1", "54"), ("5", "69"), ("4.2", "69"), ("25", "369")],
)
def test_compute_fee(km, fee):
    assert compute_fee(CONFIG, Decimal(km)) == Decimal(fee)


def test_quote_within_base_distance():
    maps = FakeMaps(distance_meters=2500)
    quote = estimator(maps).estimate(DeliveryAddress(city="Lubao", barangay="San Nicolas", customer_coords=PIN))
    assert quote.delivery_fee == Decimal("39")
    assert quote.distance_km == Decimal("2.5")
    # a pin skips geocoding
    assert maps.geocode_calls == 0


def test_quote_beyond_base_distance_geocodes_address():
    maps = FakeMaps(distance_meters=4800)
    quote = estimator(maps).estimate(DeliveryAddress(city="porac", barangay="Poblacion", street_address="12 Rizal St"))
    assert quote.delivery_fee == Decimal("69")
    assert maps.geocode_calls == 1
    assert "Porac" in quote.geocoded_address


@pytest.mark.parametrize("city", ["Angeles", "San Fernando", "Manila"])
def test_city_outside_allow_list_makes_no_provider_call(city):
    maps = FakeMaps()
    with pytest.raises(CityNotServiceableError):
        estimator(maps).estimate(DeliveryAddress(city=city, barangay="Somewhere"))
    assert maps.geocode_calls == 0
    assert maps.route_calls == 0


def test_missing_barangay():
    maps = FakeMaps()
    with pytest.raises(AddressValidationError):
        estimator(maps).estimate(DeliveryAddress(city="Guagua", barangay=" "))
    assert maps.route_calls == 0


def test_over_max_distance_is_rejected():
    with pytest.raises(OutOfRangeError) as exc:
        estimator(FakeMaps(distance_meters=26300)).estimate(
            DeliveryAddress(city="Floridablanca", barangay="Dampe", customer_coords=PIN)
        )
    assert exc.value.distance_km == Decimal("26.3")
    assert "25" in exc.value.message


def test_address_not_found():
    with pytest.raises(AddressValidationError):
        estimator(FakeMaps(found=False)).estimate(DeliveryAddress(city="Lubao", barangay="Sta. Cruz"))


def test_no_route():
    with pytest.raises(DeliveryProviderError):
        estimator(FakeMaps(distance_meters=None)).estimate(
            DeliveryAddress(city="Lubao", barangay="Sta. Cruz", customer_coords=PIN)
        )


def test_geocode_is_cached():
    maps = FakeMaps()
    est = estimator(maps)
    address = DeliveryAddress(city="Lubao", barangay="Sta. Cruz", street_address="1 Main")
    est.estimate(address)
    est.estimate(address)
    assert maps.geocode_calls == 1


@pytest.mark.parametrize(
    "km, expected",
    [("12.25", "12.3"), ("12.35", "12.4"), ("4.04", "4.0"), ("0.05", "0.1")],
)
def test_round_km_rounds_halves_up(km, expected):
    assert round_km(Decimal(km)) == Decimal(expected)
