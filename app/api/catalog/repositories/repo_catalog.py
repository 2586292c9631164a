from typing import Iterable, List, Optional

from slugify import slugify
from sqlalchemy.orm import Session, joinedload, selectinload

from app.api.catalog.models.model_product import ProductModel
from app.api.catalog.models.model_flavor import FlavorModel
from app.api.catalog.models.model_flavor_rule import ProductFlavorRuleModel
from app.api.catalog.models.model_bundle_component import BundleComponentModel


class ProductRepository:
    """Repository for products and their flavor rules / bundle components."""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(ProductModel).options(
            joinedload(ProductModel.flavor_rule),
            selectinload(ProductModel.bundle_components).joinedload(BundleComponentModel.component),
        )

    def create_product(self, **data) -> ProductModel:
        if not data.get("slug") and data.get("name"):
            data["slug"] = slugify(data["name"])
        obj = ProductModel(**data)
        self.db.add(obj)
        self.db.flush()
        return obj

    def set_flavor_rule(self, product: ProductModel, **data) -> ProductFlavorRuleModel:
        rule = product.flavor_rule
        if rule is None:
            rule = ProductFlavorRuleModel(product_id=product.id, **data)
            self.db.add(rule)
        else:
            for key, value in data.items():
                setattr(rule, key, value)
        self.db.flush()
        self.db.refresh(product)
        return rule

    def add_bundle_component(self, bundle: ProductModel, **data) -> BundleComponentModel:
        obj = BundleComponentModel(bundle_product_id=bundle.id, **data)
        self.db.add(obj)
        self.db.flush()
        self.db.refresh(bundle)
        return obj

    def get_by_id(self, product_id: int) -> Optional[ProductModel]:
        return self._query().filter(ProductModel.id == product_id).first()

    def get_by_ids(self, product_ids: Iterable[int]) -> List[ProductModel]:
        ids = list(set(product_ids))
        if not ids:
            return []
        return self._query().filter(ProductModel.id.in_(ids)).all()

    def list_products(self, only_active: bool = True) -> List[ProductModel]:
        query = self._query()
        if only_active:
            query = query.filter(ProductModel.is_active.is_(True))
        return query.order_by(ProductModel.category, ProductModel.name).all()


class FlavorRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_flavor(self, **data) -> FlavorModel:
        obj = FlavorModel(**data)
        self.db.add(obj)
        self.db.flush()
        return obj

    def get_by_ids(self, flavor_ids: Iterable[int]) -> List[FlavorModel]:
        ids = list(set(flavor_ids))
        if not ids:
            return []
        return self.db.query(FlavorModel).filter(FlavorModel.id.in_(ids)).all()

    def list_flavors(self, category: Optional[str] = "wings", only_active: bool = True) -> List[FlavorModel]:
        query = self.db.query(FlavorModel)
        if category:
            query = query.filter(FlavorModel.flavor_category == category)
        if only_active:
            query = query.filter(FlavorModel.is_active.is_(True))
        return query.order_by(FlavorModel.sort_order, FlavorModel.name).all()
