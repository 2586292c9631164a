from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class FlavorResponse(BaseModel):
    id: int
    name: str
    surcharge: float
    flavor_type: str
    flavor_category: str
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class FlavorRuleResponse(BaseModel):
    """Resolved rule, defaults already applied."""
    total_units: int
    units_per_flavor: int
    max_flavors: int
    min_flavors: int
    allow_special_flavors: bool
    single_select: bool
    surcharge_policy: str


class BundleComponentResponse(BaseModel):
    id: int
    component_product_id: int
    component_name: str
    total_units: Optional[int] = None
    has_flavor_selection: bool
    flavor_category: str

    model_config = ConfigDict(from_attributes=True)


class ProductResponse(BaseModel):
    id: int
    name: str
    price: float
    product_type: str
    sku: Optional[str] = None
    image_url: Optional[str] = None
    flavor_rule: Optional[FlavorRuleResponse] = None
    bundle_components: List[BundleComponentResponse] = []


class StoreStatusResponse(BaseModel):
    is_open: bool
    opens_at: Optional[str] = None
    closes_at: Optional[str] = None
