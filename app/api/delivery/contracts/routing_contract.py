from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from app.api.delivery.models.coordinates import Coordinates


@dataclass(frozen=True)
class GeocodeResult:
    coords: Coordinates
    formatted_address: str


@dataclass(frozen=True)
class RouteResult:
    distance_meters: int
    duration_seconds: Optional[int] = None
    encoded_polyline: Optional[str] = None


class IGeocodingProvider(ABC):
    """Turns a free-text address into coordinates."""

    @abstractmethod
    def geocode(self, address: str) -> Optional[GeocodeResult]:
        """
        None when the address is not found.
        Raises DeliveryProviderError when the provider itself fails.
        """
        pass


class IRouteProvider(ABC):
    """Driving distance between two points."""

    @abstractmethod
    def driving_route(self, origin: Coordinates, destination: Coordinates) -> Optional[RouteResult]:
        """
        None when no route exists.
        Raises DeliveryProviderError when the provider itself fails.
        """
        pass
