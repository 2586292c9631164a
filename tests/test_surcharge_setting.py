from decimal import Decimal

import pytest

from app.api.cart.core.cart_store import CartSessionStore, InMemoryCartSnapshotBackend
from app.api.cart.core.surcharge import SurchargePolicy
from app.api.catalog.models.model_product import ProductModel
from app.api.catalog.repositories.repo_catalog import ProductRepository
from app.api.catalog.repositories.repo_setting import SURCHARGE_POLICY_KEY, SettingRepository
from app.api.catalog.services.service_catalog import CatalogService, default_surcharge_policy
from app.api.orders.schemas.schema_order import CheckoutRequest
from app.api.orders.services.service_checkout import CheckoutService


def wings_subtotal(db, menu):
    """Subtotal of one 6 pc wings with both slots Truffle (+40), priced by checkout."""
    service = CheckoutService(db, store=CartSessionStore(InMemoryCartSnapshotBackend()))
    req = CheckoutRequest.model_validate({
        "items": [{"product_id": menu["wings"], "flavors": [{"flavor_id": menu["truffle"], "quantity": 6}]}],
        "customer_name": "Ana",
        "customer_phone": "09171234567",
        "order_type": "pickup",
    })
    return service.build_cart(req).subtotal


def test_without_setting_uses_deployment_default(db):
    assert default_surcharge_policy(db) == SurchargePolicy.PER_SLOT


@pytest.mark.parametrize(
    "stored, expected",
    [
        ("per_distinct_flavor", SurchargePolicy.PER_DISTINCT_FLAVOR),
        ({"policy": "per_unit_ratio"}, SurchargePolicy.PER_UNIT_RATIO),
        ("per_everything", SurchargePolicy.PER_SLOT),
        (42, SurchargePolicy.PER_SLOT),
    ],
)
def test_setting_is_read(db, stored, expected):
    SettingRepository(db).set_value(SURCHARGE_POLICY_KEY, stored)
    assert default_surcharge_policy(db) == expected


def test_setting_changes_checkout_price(db, menu):
    assert wings_subtotal(db, menu) == Decimal("280.00")

    SettingRepository(db).set_value(SURCHARGE_POLICY_KEY, "per_distinct_flavor")
    assert wings_subtotal(db, menu) == Decimal("240.00")


def test_setting_shows_in_flavor_rule(db, menu):
    SettingRepository(db).set_value(SURCHARGE_POLICY_KEY, "per_distinct_flavor")
    assert CatalogService(db).get_flavor_rule(menu["wings"]).surcharge_policy == "per_distinct_flavor"


def test_product_policy_wins_over_setting(db, menu):
    wings = db.get(ProductModel, menu["wings"])
    ProductRepository(db).set_flavor_rule(wings, surcharge_policy="per_slot")
    SettingRepository(db).set_value(SURCHARGE_POLICY_KEY, "per_distinct_flavor")

    assert CatalogService(db).get_flavor_rule(menu["wings"]).surcharge_policy == "per_slot"
    assert wings_subtotal(db, menu) == Decimal("280.00")
