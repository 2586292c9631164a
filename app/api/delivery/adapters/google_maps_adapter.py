from typing import Optional

import httpx

from app.api.delivery.contracts.routing_contract import (
    GeocodeResult,
    IGeocodingProvider,
    IRouteProvider,
    RouteResult,
)
from app.api.delivery.core.delivery_fee import DeliveryProviderError, GENERIC_FAILURE
from app.api.delivery.models.coordinates import Coordinates
from app.config import settings
from app.utils.logger import logger


class GoogleMapsAdapter(IGeocodingProvider, IRouteProvider):
    """Google Geocoding API plus Routes API (computeRoutes)."""

    GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
    ROUTES_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"
    ROUTES_FIELD_MASK = "routes.distanceMeters,routes.duration,routes.polyline.encodedPolyline"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 10.0):
        self.api_key = api_key or settings.GOOGLE_MAPS_API_KEY
        self.timeout = timeout

    def _require_key(self):
        if not self.api_key:
            logger.error("[GoogleMapsAdapter] GOOGLE_MAPS_API_KEY not configured")
            raise DeliveryProviderError("Google Maps API not configured")

    def geocode(self, address: str) -> Optional[GeocodeResult]:
        self._require_key()
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(
                    self.GEOCODE_URL,
                    params={
                        "address": address,
                        "key": self.api_key,
                        "region": "ph",
                        "components": "country:PH",
                    },
                )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[GoogleMapsAdapter] HTTP {e.response.status_code} geocoding '{address}'")
            raise DeliveryProviderError(GENERIC_FAILURE)
        except httpx.HTTPError as e:
            logger.error(f"[GoogleMapsAdapter] Error geocoding '{address}': {e}")
            raise DeliveryProviderError(GENERIC_FAILURE)

        status_code = data.get("status")
        if status_code == "ZERO_RESULTS":
            logger.info(f"[GoogleMapsAdapter] No results for '{address}'")
            return None
        if status_code != "OK" or not data.get("results"):
            error_message = data.get("error_message") or GENERIC_FAILURE
            logger.error(f"[GoogleMapsAdapter] Geocoding status {status_code} for '{address}': {error_message}")
            raise DeliveryProviderError(error_message)

        first = data["results"][0]
        location = first["geometry"]["location"]
        return GeocodeResult(
            coords=Coordinates(lat=location["lat"], lng=location["lng"]),
            formatted_address=first.get("formatted_address") or address,
        )

    def driving_route(self, origin: Coordinates, destination: Coordinates) -> Optional[RouteResult]:
        self._require_key()

        def waypoint(c: Coordinates) -> dict:
            return {"location": {"latLng": {"latitude": c.lat, "longitude": c.lng}}}

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    self.ROUTES_URL,
                    headers={
                        "Content-Type": "application/json",
                        "X-Goog-Api-Key": self.api_key,
                        "X-Goog-FieldMask": self.ROUTES_FIELD_MASK,
                    },
                    json={
                        "origin": waypoint(origin),
                        "destination": waypoint(destination),
                        "travelMode": "DRIVE",
                        "routingPreference": "TRAFFIC_AWARE",
                    },
                )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[GoogleMapsAdapter] Error computing route to {destination.to_tuple()}: {e}")
            raise DeliveryProviderError(GENERIC_FAILURE)

        if response.status_code >= 400:
            error_message = (data.get("error") or {}).get("message") or GENERIC_FAILURE
            logger.error(f"[GoogleMapsAdapter] Routes API HTTP {response.status_code}: {error_message}")
            raise DeliveryProviderError(error_message)

        routes = data.get("routes") or []
        if not routes or routes[0].get("distanceMeters") is None:
            logger.warning(f"[GoogleMapsAdapter] No route found to {destination.to_tuple()}")
            return None

        route = routes[0]
        duration = route.get("duration")
        return RouteResult(
            distance_meters=int(route["distanceMeters"]),
            duration_seconds=int(duration.rstrip("s")) if isinstance(duration, str) and duration.rstrip("s").isdigit() else None,
            encoded_polyline=(route.get("polyline") or {}).get("encodedPolyline"),
        )
