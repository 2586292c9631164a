from decimal import Decimal

import pytest

from app.api.cart.core.cart import Cart
from app.api.cart.core.exceptions import CartLineNotFoundError, FlavorSelectionError
from app.api.catalog.contracts.catalog_contract import (
    BundleComponentDTO,
    FlavorDTO,
    FlavorRuleDTO,
    ProductDTO,
)

RICE = ProductDTO(id=1, name="Rice Meal", price=Decimal("150"))
WINGS = ProductDTO(
    id=2,
    name="6 pcs Wings",
    price=Decimal("200"),
    product_type="flavored",
    flavor_rule=FlavorRuleDTO(total_units=6, units_per_flavor=3, min_flavors=1, max_flavors=2),
)
BUFFALO = FlavorDTO(id=1, name="Buffalo")
GARLIC = FlavorDTO(id=2, name="Garlic")
TRUFFLE = FlavorDTO(id=3, name="Truffle", surcharge=Decimal("40"), flavor_type="special")
FLAVORS = {f.id: f for f in (BUFFALO, GARLIC, TRUFFLE)}
BUNDLE = ProductDTO(
    id=3,
    name="Barkada Bundle",
    price=Decimal("599"),
    product_type="bundle",
    bundle_components=[
        BundleComponentDTO(id=7, component_product_id=2, component_name="6 pcs Wings",
                           total_units=6, has_flavor_selection=True),
        BundleComponentDTO(id=8, component_product_id=1, component_name="Rice Meal"),
    ],
)


def test_end_to_end_scenario():
    cart = Cart()
    cart.add_simple(RICE)
    line = cart.add_simple(RICE)
    assert len(cart.lines) == 1
    assert line.quantity == 2
    assert line.line_total == Decimal("300.00")

    flavored = cart.add_flavored(WINGS, {BUFFALO.id: 3, GARLIC.id: 3}, FLAVORS)
    assert flavored.line_total == Decimal("200.00")
    assert cart.subtotal == Decimal("500.00")
    assert cart.item_count == 3


def test_flavored_lines_never_merge():
    cart = Cart()
    cart.add_flavored(WINGS, {BUFFALO.id: 6}, FLAVORS)
    cart.add_flavored(WINGS, {BUFFALO.id: 6}, FLAVORS)
    assert len(cart.lines) == 2


def test_flavored_line_includes_surcharge():
    cart = Cart(default_policy="per_slot")
    line = cart.add_flavored(WINGS, {TRUFFLE.id: 6}, FLAVORS)
    assert line.unit_price == Decimal("280.00")
    assert line.line_total == Decimal("280.00")


def test_surcharge_scales_with_quantity():
    cart = Cart()
    line = cart.add_flavored(WINGS, {TRUFFLE.id: 3, BUFFALO.id: 3}, FLAVORS)
    cart.update_quantity(line.id, 2)
    assert line.quantity == 3
    assert line.line_total == Decimal("720.00")


def test_incomplete_selection_is_rejected():
    with pytest.raises(FlavorSelectionError):
        Cart().add_flavored(WINGS, {BUFFALO.id: 3}, FLAVORS)


def test_simple_add_refuses_flavored_product():
    with pytest.raises(FlavorSelectionError):
        Cart().add_simple(WINGS)


def test_bundle_needs_a_flavor_per_component():
    cart = Cart()
    with pytest.raises(FlavorSelectionError):
        cart.add_bundle(BUNDLE, {}, FLAVORS)
    line = cart.add_bundle(BUNDLE, {7: TRUFFLE.id}, FLAVORS)
    assert line.line_total == Decimal("639.00")
    assert [f.name for f in line.flavors] == ["Truffle"]


def test_quantity_to_zero_removes_line():
    cart = Cart()
    cart.add_simple(RICE)
    line = cart.add_flavored(WINGS, {BUFFALO.id: 6}, FLAVORS)
    assert cart.update_quantity(line.id, -line.quantity) is None
    assert [l.product.id for l in cart.lines] == [RICE.id]
    assert cart.item_count == 1
    assert cart.subtotal == Decimal("150.00")


def test_unknown_line():
    with pytest.raises(CartLineNotFoundError):
        Cart().update_quantity("nope", 1)


def test_recalculate_is_idempotent():
    cart = Cart()
    cart.add_simple(RICE)
    cart.add_flavored(WINGS, {TRUFFLE.id: 6}, FLAVORS)
    first = cart.recalculate()
    assert cart.recalculate() == first == cart.subtotal


def test_snapshot_restores_the_same_cart():
    cart = Cart()
    cart.add_simple(RICE)
    cart.add_flavored(WINGS, {TRUFFLE.id: 3, GARLIC.id: 3}, FLAVORS)
    restored = Cart.from_snapshot(cart.to_snapshot())
    assert restored.subtotal == cart.subtotal
    assert restored.item_count == cart.item_count
    assert [l.id for l in restored.lines] == [l.id for l in cart.lines]


def test_clear():
    cart = Cart()
    cart.add_simple(RICE)
    cart.clear()
    assert cart.is_empty
    assert cart.subtotal == Decimal("0.00")
