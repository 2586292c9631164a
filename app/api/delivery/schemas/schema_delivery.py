from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys; snake_case is accepted too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CoordinatesSchema(CamelModel):
    lat: float
    lng: float


class DeliveryFeeRequest(CamelModel):
    city: Optional[str] = None
    barangay: Optional[str] = None
    street_address: str = Field("", max_length=255)
    landmark: Optional[str] = Field(None, max_length=255)
    customer_lat: Optional[float] = Field(None, ge=-90, le=90)
    customer_lng: Optional[float] = Field(None, ge=-180, le=180)


class DeliveryFeeResponse(CamelModel):
    delivery_fee: Decimal
    distance_km: Decimal
    geocoded_address: Optional[str] = None
    customer_coords: CoordinatesSchema
    restaurant_coords: CoordinatesSchema
    encoded_polyline: Optional[str] = None
