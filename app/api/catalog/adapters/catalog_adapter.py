from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.api.catalog.contracts.catalog_contract import (
    BundleComponentDTO,
    FlavorDTO,
    FlavorRuleDTO,
    ICatalogContract,
    ProductDTO,
)
from app.api.catalog.models.model_flavor import FlavorModel
from app.api.catalog.models.model_product import ProductModel
from app.api.catalog.repositories.repo_catalog import FlavorRepository, ProductRepository


def _enum_value(value) -> str:
    return getattr(value, "value", value)


def to_flavor_dto(flavor: FlavorModel) -> FlavorDTO:
    return FlavorDTO(
        id=flavor.id,
        name=flavor.name,
        surcharge=flavor.surcharge or 0,
        flavor_type=_enum_value(flavor.flavor_type),
        flavor_category=flavor.flavor_category,
        is_active=bool(flavor.is_active),
        is_available=bool(flavor.is_available),
    )


def to_product_dto(product: ProductModel) -> ProductDTO:
    rule = product.flavor_rule
    return ProductDTO(
        id=product.id,
        name=product.name,
        price=product.price,
        product_type=_enum_value(product.product_type),
        single_unit=bool(product.single_unit),
        sku=product.sku,
        image_url=product.image_url,
        is_active=bool(product.is_active),
        flavor_rule=FlavorRuleDTO.model_validate(rule) if rule is not None else None,
        bundle_components=[
            BundleComponentDTO(
                id=c.id,
                component_product_id=c.component_product_id,
                component_name=c.component.name if c.component else "",
                total_units=c.total_units,
                units_per_flavor=c.units_per_flavor,
                has_flavor_selection=bool(c.has_flavor_selection),
                flavor_category=c.flavor_category,
            )
            for c in product.bundle_components
        ],
    )


class CatalogAdapter(ICatalogContract):
    """ICatalogContract backed by the local catalog tables."""

    def __init__(self, db: Session):
        self.products = ProductRepository(db)
        self.flavors = FlavorRepository(db)

    def get_product(self, product_id: int) -> Optional[ProductDTO]:
        product = self.products.get_by_id(product_id)
        return to_product_dto(product) if product else None

    def get_products(self, product_ids: Iterable[int]) -> Dict[int, ProductDTO]:
        return {p.id: to_product_dto(p) for p in self.products.get_by_ids(product_ids)}

    def list_products(self, only_active: bool = True) -> List[ProductDTO]:
        return [to_product_dto(p) for p in self.products.list_products(only_active)]

    def get_flavors(self, flavor_ids: Iterable[int]) -> Dict[int, FlavorDTO]:
        return {f.id: to_flavor_dto(f) for f in self.flavors.get_by_ids(flavor_ids)}

    def list_flavors(self, category: Optional[str] = "wings", only_active: bool = True) -> List[FlavorDTO]:
        return [to_flavor_dto(f) for f in self.flavors.list_flavors(category, only_active)]
