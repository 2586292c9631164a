from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FlavorDTO(BaseModel):
    """Catalog flavor as seen by the cart."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    surcharge: Decimal = Decimal("0")
    flavor_type: str = "all_time"
    flavor_category: str = "wings"
    is_active: bool = True
    is_available: bool = True

    @property
    def is_special(self) -> bool:
        return self.flavor_type == "special"

    @property
    def effective_surcharge(self) -> Decimal:
        """A flavor only adds to the price when it is special or carries a positive surcharge."""
        surcharge = Decimal(str(self.surcharge or 0))
        if self.is_special or surcharge > 0:
            return max(surcharge, Decimal("0"))
        return Decimal("0")


class FlavorRuleDTO(BaseModel):
    """Raw rule row. Missing counts are filled in by the resolver."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    total_units: Optional[int] = None
    units_per_flavor: Optional[int] = None
    max_flavors: Optional[int] = None
    min_flavors: Optional[int] = None
    allow_special_flavors: bool = True
    surcharge_policy: Optional[str] = None


class BundleComponentDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    component_product_id: int
    component_name: str
    total_units: Optional[int] = None
    units_per_flavor: Optional[int] = None
    has_flavor_selection: bool = False
    flavor_category: str = "wings"


class ProductDTO(BaseModel):
    """Product snapshot carried by cart lines."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    price: Decimal
    product_type: str = "simple"
    single_unit: bool = False
    sku: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    flavor_rule: Optional[FlavorRuleDTO] = None
    bundle_components: List[BundleComponentDTO] = Field(default_factory=list)

    @property
    def is_flavored(self) -> bool:
        return self.product_type == "flavored"

    @property
    def is_bundle(self) -> bool:
        return self.product_type == "bundle"


class ICatalogContract(ABC):
    """Read access to products and flavors."""

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[ProductDTO]:
        raise NotImplementedError

    @abstractmethod
    def get_products(self, product_ids: Iterable[int]) -> Dict[int, ProductDTO]:
        """Products keyed by id; unknown ids are left out."""
        raise NotImplementedError

    @abstractmethod
    def list_products(self, only_active: bool = True) -> List[ProductDTO]:
        raise NotImplementedError

    @abstractmethod
    def get_flavors(self, flavor_ids: Iterable[int]) -> Dict[int, FlavorDTO]:
        raise NotImplementedError

    @abstractmethod
    def list_flavors(self, category: Optional[str] = "wings", only_active: bool = True) -> List[FlavorDTO]:
        raise NotImplementedError
