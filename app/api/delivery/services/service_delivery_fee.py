from decimal import Decimal
from functools import lru_cache

from fastapi import HTTPException, status

from app.api.delivery.adapters.cache_adapter import CacheAdapter
from app.api.delivery.core.delivery_fee import (
    AddressValidationError,
    DeliveryAddress,
    DeliveryFeeConfig,
    DeliveryFeeError,
    DeliveryFeeEstimator,
    DeliveryProviderError,
    DeliveryQuote,
    OutOfRangeError,
)
from app.api.delivery.models.coordinates import Coordinates
from app.api.delivery.schemas.schema_delivery import CoordinatesSchema, DeliveryFeeRequest, DeliveryFeeResponse
from app.config import settings
from app.utils.logger import logger
from app.utils.prometheus_metrics import delivery_fee_requests_total


def config_from_settings() -> DeliveryFeeConfig:
    return DeliveryFeeConfig(
        allowed_cities=tuple(settings.DELIVERY_ALLOWED_CITIES),
        base_fee=Decimal(settings.DELIVERY_BASE_FEE),
        base_km=Decimal(settings.DELIVERY_BASE_KM),
        rate_per_km=Decimal(settings.DELIVERY_RATE_PER_KM),
        max_distance_km=Decimal(settings.DELIVERY_MAX_DISTANCE_KM),
        restaurant=Coordinates(lat=settings.RESTAURANT_LAT, lng=settings.RESTAURANT_LNG),
    )


@lru_cache(maxsize=1)
def get_geocode_cache() -> CacheAdapter:
    return CacheAdapter()


class DeliveryFeeService:
    """HTTP-facing wrapper around DeliveryFeeEstimator. No retries: the customer resubmits."""

    def __init__(self, estimator: DeliveryFeeEstimator):
        self.estimator = estimator

    def quote(self, req: DeliveryFeeRequest) -> DeliveryQuote:
        address = DeliveryAddress(
            city=req.city or "",
            barangay=req.barangay or "",
            street_address=req.street_address or "",
            landmark=req.landmark,
            customer_coords=Coordinates.from_optional(req.customer_lat, req.customer_lng),
        )
        try:
            quote = self.estimator.estimate(address)
        except (AddressValidationError, OutOfRangeError) as e:
            delivery_fee_requests_total.labels(outcome="rejected").inc()
            raise HTTPException(status.HTTP_400_BAD_REQUEST, e.message)
        except DeliveryProviderError as e:
            delivery_fee_requests_total.labels(outcome="provider_error").inc()
            logger.warning(f"[DeliveryFee] Provider error: {e.message}")
            raise HTTPException(status.HTTP_400_BAD_REQUEST if e.customer_coords else status.HTTP_502_BAD_GATEWAY, e.message)
        except DeliveryFeeError as e:
            delivery_fee_requests_total.labels(outcome="error").inc()
            raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)

        delivery_fee_requests_total.labels(outcome="ok").inc()
        return quote

    def calculate(self, req: DeliveryFeeRequest) -> DeliveryFeeResponse:
        quote = self.quote(req)
        restaurant = self.estimator.config.restaurant
        return DeliveryFeeResponse(
            delivery_fee=quote.delivery_fee,
            distance_km=quote.distance_km,
            geocoded_address=quote.geocoded_address,
            customer_coords=CoordinatesSchema(lat=quote.customer_coords.lat, lng=quote.customer_coords.lng),
            restaurant_coords=CoordinatesSchema(lat=restaurant.lat, lng=restaurant.lng),
            encoded_polyline=quote.encoded_polyline,
        )
