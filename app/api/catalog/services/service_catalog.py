from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.catalog.adapters.catalog_adapter import CatalogAdapter
from app.api.catalog.contracts.catalog_contract import ICatalogContract, ProductDTO
from app.api.catalog.schemas.schema_catalog import (
    BundleComponentResponse,
    FlavorResponse,
    FlavorRuleResponse,
    ProductResponse,
)
from app.api.catalog.repositories.repo_setting import SettingRepository
from app.api.cart.core.flavor_rules import resolve
from app.api.cart.core.surcharge import SurchargePolicy, policy_for
from app.config.settings import DEFAULT_SURCHARGE_POLICY


def default_surcharge_policy(db: Session) -> SurchargePolicy:
    """The `surcharge_policy` setting when it names a known policy, else DEFAULT_SURCHARGE_POLICY."""
    fallback = SurchargePolicy.parse(DEFAULT_SURCHARGE_POLICY)
    return SurchargePolicy.parse(SettingRepository(db).surcharge_policy(fallback.value), fallback)


def rule_response(product: ProductDTO, default_policy: SurchargePolicy | str = DEFAULT_SURCHARGE_POLICY) -> FlavorRuleResponse:
    rule = resolve(product)
    return FlavorRuleResponse(
        total_units=rule.total_units,
        units_per_flavor=rule.units_per_flavor,
        max_flavors=rule.max_flavors,
        min_flavors=rule.min_flavors,
        allow_special_flavors=rule.allow_special_flavors,
        single_select=rule.single_select,
        surcharge_policy=policy_for(rule, default_policy).value,
    )


class CatalogService:
    def __init__(self, db: Session, catalog: ICatalogContract | None = None):
        self.catalog: ICatalogContract = catalog or CatalogAdapter(db)
        self.default_policy = default_surcharge_policy(db)

    def _to_response(self, product: ProductDTO) -> ProductResponse:
        return ProductResponse(
            id=product.id,
            name=product.name,
            price=float(product.price),
            product_type=product.product_type,
            sku=product.sku,
            image_url=product.image_url,
            flavor_rule=rule_response(product, self.default_policy) if product.is_flavored else None,
            bundle_components=[BundleComponentResponse.model_validate(c) for c in product.bundle_components],
        )

    def list_products(self) -> List[ProductResponse]:
        return [self._to_response(p) for p in self.catalog.list_products(only_active=True)]

    def get_flavor_rule(self, product_id: int) -> FlavorRuleResponse:
        product = self.catalog.get_product(product_id)
        if not product or not product.is_active:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Product not found")
        return rule_response(product, self.default_policy)

    def list_flavors(self, category: str) -> List[FlavorResponse]:
        return [
            FlavorResponse(
                id=f.id,
                name=f.name,
                surcharge=float(f.surcharge),
                flavor_type=f.flavor_type,
                flavor_category=f.flavor_category,
                is_available=f.is_available,
            )
            for f in self.catalog.list_flavors(category=category, only_active=True)
        ]
