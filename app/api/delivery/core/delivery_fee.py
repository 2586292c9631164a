"""
Delivery fee estimation.

City and barangay are checked before any provider is called. The customer's
pin (or, without one, the geocoded address) is routed from the restaurant and
priced as a base fee for the first kilometres plus a per-km rate, each
started kilometre counting in full.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from app.api.delivery.adapters.cache_adapter import CacheAdapter
from app.api.delivery.contracts.routing_contract import IGeocodingProvider, IRouteProvider
from app.api.delivery.models.coordinates import Coordinates
from app.utils.logger import logger

GENERIC_FAILURE = "Failed to calculate delivery fee"


class DeliveryFeeError(Exception):
    """Base error; `message` is safe to show to the customer."""

    def __init__(self, message: str, *, distance_km: Optional[Decimal] = None,
                 customer_coords: Optional[Coordinates] = None):
        super().__init__(message)
        self.message = message
        self.distance_km = distance_km
        self.customer_coords = customer_coords


class AddressValidationError(DeliveryFeeError):
    pass


class CityNotServiceableError(AddressValidationError):
    pass


class OutOfRangeError(DeliveryFeeError):
    pass


class DeliveryProviderError(DeliveryFeeError):
    """Geocoding/routing provider failure. Carries the provider's message when it sent one."""


@dataclass(frozen=True)
class DeliveryFeeConfig:
    allowed_cities: Sequence[str] = ("Floridablanca", "Lubao", "Guagua", "Porac")
    base_fee: Decimal = Decimal("39")
    base_km: Decimal = Decimal("3")
    rate_per_km: Decimal = Decimal("15")
    max_distance_km: Decimal = Decimal("25")
    restaurant: Coordinates = field(default_factory=lambda: Coordinates(lat=14.972683712714007, lng=120.53207910676976))
    province: str = "Pampanga"
    country: str = "Philippines"


@dataclass(frozen=True)
class DeliveryAddress:
    city: str
    barangay: str
    street_address: str = ""
    landmark: Optional[str] = None
    customer_coords: Optional[Coordinates] = None


@dataclass(frozen=True)
class DeliveryQuote:
    delivery_fee: Decimal
    distance_km: Decimal
    customer_coords: Coordinates
    geocoded_address: Optional[str] = None
    encoded_polyline: Optional[str] = None


def check_serviceable(config: DeliveryFeeConfig, city: Optional[str], barangay: Optional[str]) -> str:
    """Returns the canonical city name, or raises before anything leaves the process."""
    if not city or not city.strip():
        raise AddressValidationError("Please select a city")
    if not barangay or not barangay.strip():
        raise AddressValidationError("Please select a barangay")

    wanted = city.strip().lower()
    for allowed in config.allowed_cities:
        if allowed.lower() == wanted:
            return allowed
    raise CityNotServiceableError(
        f"We only deliver to {', '.join(config.allowed_cities)}. Please select a valid city."
    )


def compute_fee(config: DeliveryFeeConfig, distance_km: Decimal) -> Decimal:
    """base_fee up to base_km; then rate_per_km for every started km beyond it."""
    if distance_km <= config.base_km:
        return config.base_fee
    additional_km = math.ceil(distance_km - config.base_km)
    return config.base_fee + Decimal(additional_km) * config.rate_per_km


def round_km(distance_km: Decimal) -> Decimal:
    return distance_km.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


class DeliveryFeeEstimator:
    def __init__(
        self,
        config: DeliveryFeeConfig,
        geocoder: IGeocodingProvider,
        router: IRouteProvider,
        cache: Optional[CacheAdapter] = None,
    ):
        self.config = config
        self.geocoder = geocoder
        self.router = router
        self.cache = cache or CacheAdapter()

    def full_address(self, address: DeliveryAddress, city: str) -> str:
        parts: List[str] = [address.street_address, address.barangay, city, self.config.province, self.config.country]
        return ", ".join(p.strip() for p in parts if p and p.strip())

    def _geocode(self, full_address: str):
        cached = self.cache.get(full_address)
        if cached is not None:
            return cached
        result = self.geocoder.geocode(full_address)
        if result is not None:
            self.cache.set(full_address, result)
        return result

    def estimate(self, address: DeliveryAddress) -> DeliveryQuote:
        city = check_serviceable(self.config, address.city, address.barangay)
        full_address = self.full_address(address, city)

        geocoded_address = None
        coords = address.customer_coords
        if coords is None:
            geocoded = self._geocode(full_address)
            if geocoded is None:
                raise AddressValidationError("Please select your location on the map")
            coords = geocoded.coords
            geocoded_address = geocoded.formatted_address

        route = self.router.driving_route(self.config.restaurant, coords)
        if route is None:
            raise DeliveryProviderError(
                "Unable to calculate route to your location. Please try adjusting the pin.",
                customer_coords=coords,
            )

        distance = Decimal(route.distance_meters) / Decimal(1000)
        if distance > self.config.max_distance_km:
            raise OutOfRangeError(
                f"Sorry, this location is {round_km(distance)} km away. "
                f"We only deliver within {self.config.max_distance_km} km of our restaurant.",
                distance_km=round_km(distance),
                customer_coords=coords,
            )

        fee = compute_fee(self.config, distance)
        logger.info(
            f"[DeliveryFee] city={city} barangay={address.barangay} distance={round_km(distance)}km fee={fee}"
        )
        return DeliveryQuote(
            delivery_fee=fee,
            distance_km=round_km(distance),
            customer_coords=coords,
            geocoded_address=geocoded_address or full_address,
            encoded_polyline=route.encoded_polyline,
        )
