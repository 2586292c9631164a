from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.api.cart.schemas.schema_cart import BundleChoiceRequest, FlavorQuantityRequest
from app.api.delivery.schemas.schema_delivery import DeliveryFeeRequest
from app.api.orders.core.order_status import OrderStatus
from app.api.orders.models.model_order import OrderType, PaymentMethod


# ------ Requests ------
class CheckoutItemRequest(BaseModel):
    """One cart line as the client holds it. Prices are looked up again, never read from here."""
    product_id: int
    quantity: int = Field(1, ge=1)
    flavors: List[FlavorQuantityRequest] = []
    choices: List[BundleChoiceRequest] = []


class CheckoutRequest(BaseModel):
    session_id: Optional[str] = Field(None, min_length=8, max_length=64)
    items: List[CheckoutItemRequest] = []

    customer_name: str = Field("", max_length=150)
    customer_phone: str = Field("", max_length=20)
    customer_email: Optional[str] = Field(None, max_length=150)

    order_type: OrderType
    payment_method: PaymentMethod = PaymentMethod.CASH

    delivery: Optional[DeliveryFeeRequest] = None
    pickup_date: Optional[date] = None
    pickup_time: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = Field(None, max_length=500)

    # abandoned checkout this order recovers
    recover_id: Optional[int] = None

    @model_validator(mode="after")
    def _strip(self):
        self.customer_name = self.customer_name.strip()
        self.customer_phone = self.customer_phone.strip()
        if self.customer_email is not None:
            self.customer_email = self.customer_email.strip() or None
        return self


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus
    internal_notes: Optional[str] = Field(None, max_length=500)


# ------ Responses ------
class OrderItemFlavorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    flavor_id: Optional[int] = None
    flavor_name: str
    quantity: int
    surcharge_applied: Decimal


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    flavor_surcharge_total: Decimal
    line_total: Decimal
    flavors: List[OrderItemFlavorResponse] = []


class PaymentProofResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    image_url: str
    uploaded_at: Optional[datetime] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    status: OrderStatus
    order_type: OrderType
    payment_method: PaymentMethod
    subtotal: Decimal
    delivery_fee: Optional[Decimal] = None
    delivery_distance_km: Optional[Decimal] = None
    total_amount: Decimal
    delivery_address: Optional[str] = None
    pickup_date: Optional[date] = None
    pickup_time: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    status_changed_at: Optional[datetime] = None
    items: List[OrderItemResponse] = []
    payment_proofs: List[PaymentProofResponse] = []
