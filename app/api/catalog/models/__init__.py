from .model_product import ProductModel, ProductType
from .model_flavor import FlavorModel, FlavorType
from .model_flavor_rule import ProductFlavorRuleModel
from .model_bundle_component import BundleComponentModel
from .model_setting import SettingModel

__all__ = [
    "ProductModel",
    "ProductType",
    "FlavorModel",
    "FlavorType",
    "ProductFlavorRuleModel",
    "BundleComponentModel",
    "SettingModel",
]
