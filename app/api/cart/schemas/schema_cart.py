from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


# ------ Requests ------
class FlavorQuantityRequest(BaseModel):
    flavor_id: int
    quantity: int = Field(..., ge=0, description="Pieces with this flavor")


class AddSimpleItemRequest(BaseModel):
    product_id: int


class AddFlavoredItemRequest(BaseModel):
    product_id: int
    flavors: List[FlavorQuantityRequest] = Field(..., min_length=1)


class BundleChoiceRequest(BaseModel):
    component_id: int
    flavor_id: int


class AddBundleItemRequest(BaseModel):
    product_id: int
    choices: List[BundleChoiceRequest] = []


class UpdateQuantityRequest(BaseModel):
    delta: int = Field(..., description="Change in quantity; the line is removed at zero")


class FlavorSelectionPreviewRequest(BaseModel):
    product_id: int
    flavors: List[FlavorQuantityRequest] = []


# ------ Responses ------
class CartFlavorResponse(BaseModel):
    id: int
    name: str
    quantity: int
    surcharge: Decimal


class CartLineResponse(BaseModel):
    id: str
    product_id: int
    product_name: str
    product_type: str
    unit_price: Decimal
    quantity: int
    flavors: List[CartFlavorResponse] = []
    line_total: Decimal


class CartResponse(BaseModel):
    session_id: str
    items: List[CartLineResponse]
    subtotal: Decimal
    item_count: int
    welcome_back: bool = False


class FlavorSelectionPreviewResponse(BaseModel):
    is_complete: bool
    total_selected: int
    total_units: int
    min_flavors: int
    max_flavors: int
    surcharge: Decimal
    surcharge_policy: str
    flavors: List[CartFlavorResponse] = []
    message: Optional[str] = None
