from decimal import Decimal

import pytest

from app.api.cart.core.exceptions import FlavorSelectionError
from app.api.cart.core.flavor_rules import FlavorRule
from app.api.cart.core.surcharge import SurchargePolicy, calculate_surcharge, money, policy_for
from app.api.catalog.contracts.catalog_contract import FlavorDTO

RULE = FlavorRule(total_units=6, units_per_flavor=3, max_flavors=2, min_flavors=1)
TRUFFLE = FlavorDTO(id=1, name="Truffle", surcharge=Decimal("40"), flavor_type="special")
BUFFALO = FlavorDTO(id=2, name="Buffalo")
FLAVORS = {f.id: f for f in (TRUFFLE, BUFFALO)}


def surcharge(selection, policy, rule=RULE):
    return calculate_surcharge(rule=rule, selection=selection, flavors=FLAVORS, policy=policy)


def test_per_slot_charges_every_slot():
    result = surcharge({TRUFFLE.id: 6}, SurchargePolicy.PER_SLOT)
    assert result.total == Decimal("80.00")
    assert result.charges[0].surcharge == Decimal("80.00")


def test_per_distinct_flavor_charges_once():
    assert surcharge({TRUFFLE.id: 6}, SurchargePolicy.PER_DISTINCT_FLAVOR).total == Decimal("40.00")


def test_per_unit_ratio_can_be_fractional():
    rule = FlavorRule(total_units=4, units_per_flavor=3, max_flavors=2, min_flavors=1)
    result = surcharge({TRUFFLE.id: 4}, SurchargePolicy.PER_UNIT_RATIO, rule)
    assert result.total == Decimal("53.33")


def test_per_slot_rejects_partial_slots():
    with pytest.raises(FlavorSelectionError):
        surcharge({TRUFFLE.id: 4}, SurchargePolicy.PER_SLOT)


def test_regular_flavor_adds_nothing():
    for policy in SurchargePolicy:
        assert surcharge({BUFFALO.id: 6}, policy).total == Decimal("0.00")


def test_never_negative():
    odd = FlavorDTO(id=3, name="Refund", surcharge=Decimal("-10"), flavor_type="special")
    result = calculate_surcharge(
        rule=RULE, selection={odd.id: 6}, flavors={odd.id: odd}, policy=SurchargePolicy.PER_SLOT,
    )
    assert result.total >= 0


def test_unknown_flavor():
    with pytest.raises(FlavorSelectionError):
        surcharge({99: 3}, SurchargePolicy.PER_SLOT)


def test_product_policy_wins_over_default():
    rule = FlavorRule(6, 3, 2, 1, surcharge_policy="per_distinct_flavor")
    assert policy_for(rule, "per_slot") == SurchargePolicy.PER_DISTINCT_FLAVOR
    assert policy_for(RULE, "per_unit_ratio") == SurchargePolicy.PER_UNIT_RATIO
    assert SurchargePolicy.parse("bogus") == SurchargePolicy.PER_SLOT


def test_money_rounds_half_up():
    assert money("2.345") == Decimal("2.35")
    assert money(None) == Decimal("0.00")
