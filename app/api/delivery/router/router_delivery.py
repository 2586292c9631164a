from functools import lru_cache

from fastapi import APIRouter, Depends, status

from app.api.delivery.adapters.google_maps_adapter import GoogleMapsAdapter
from app.api.delivery.core.delivery_fee import DeliveryFeeEstimator
from app.api.delivery.schemas.schema_delivery import DeliveryFeeRequest, DeliveryFeeResponse
from app.api.delivery.services.service_delivery_fee import (
    DeliveryFeeService,
    config_from_settings,
    get_geocode_cache,
)
from app.utils.logger import logger

router = APIRouter(
    prefix="/api/delivery",
    tags=["Client - Delivery"],
)


@lru_cache(maxsize=1)
def _get_google_maps_adapter_instance() -> GoogleMapsAdapter:
    return GoogleMapsAdapter()


def get_google_maps_adapter() -> GoogleMapsAdapter:
    """Dependency for the maps provider (singleton). Overridden in tests."""
    return _get_google_maps_adapter_instance()


def get_delivery_fee_service(adapter=Depends(get_google_maps_adapter)) -> DeliveryFeeService:
    estimator = DeliveryFeeEstimator(
        config=config_from_settings(),
        geocoder=adapter,
        router=adapter,
        cache=get_geocode_cache(),
    )
    return DeliveryFeeService(estimator)


@router.post(
    "/fee",
    response_model=DeliveryFeeResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
)
def calculate_delivery_fee(
    req: DeliveryFeeRequest,
    service: DeliveryFeeService = Depends(get_delivery_fee_service),
):
    """
    Delivery fee and driving distance for an address.

    Cities outside the delivery area are rejected before the maps provider is called.
    """
    logger.info(f"[DeliveryFee] Request - city={req.city} barangay={req.barangay}")
    return service.calculate(req)
