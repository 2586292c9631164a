"""
Flavor rules for flavored products.

A flavored product is sold as `total_units` pieces split into slots of
`units_per_flavor` pieces, each slot getting one flavor. `resolve` turns the
catalog row (or its absence) into a complete rule, and `FlavorSelection`
is the stepper a customer uses to fill the slots.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from app.api.catalog.contracts.catalog_contract import FlavorDTO, ProductDTO
from app.api.cart.core.exceptions import FlavorSelectionError, IncompleteSelectionError

DEFAULT_TOTAL_UNITS = 6
DEFAULT_UNITS_PER_FLAVOR = 3
DEFAULT_MIN_FLAVORS = 1


@dataclass(frozen=True)
class FlavorRule:
    total_units: int
    units_per_flavor: int
    max_flavors: int
    min_flavors: int
    allow_special_flavors: bool = True
    surcharge_policy: Optional[str] = None

    @property
    def single_select(self) -> bool:
        """One piece, one flavor: the UI shows a picker instead of a stepper."""
        return self.total_units == 1 and self.units_per_flavor == 1


SINGLE_UNIT_RULE = FlavorRule(total_units=1, units_per_flavor=1, max_flavors=1, min_flavors=1)


def resolve(product: ProductDTO) -> FlavorRule:
    """
    Complete flavor rule for a product.

    No rule row: {6, 3, ceil(6/3), 1}, or {1, 1, 1, 1} for single-unit products.
    Zero or missing fields on a rule row fall back one by one to the same defaults.
    """
    raw = product.flavor_rule
    if raw is None:
        if product.single_unit:
            return SINGLE_UNIT_RULE
        return FlavorRule(
            total_units=DEFAULT_TOTAL_UNITS,
            units_per_flavor=DEFAULT_UNITS_PER_FLAVOR,
            max_flavors=math.ceil(DEFAULT_TOTAL_UNITS / DEFAULT_UNITS_PER_FLAVOR),
            min_flavors=DEFAULT_MIN_FLAVORS,
        )

    total_units = raw.total_units or DEFAULT_TOTAL_UNITS
    units_per_flavor = raw.units_per_flavor or DEFAULT_UNITS_PER_FLAVOR
    return FlavorRule(
        total_units=total_units,
        units_per_flavor=units_per_flavor,
        max_flavors=raw.max_flavors or math.ceil(total_units / units_per_flavor),
        min_flavors=raw.min_flavors or DEFAULT_MIN_FLAVORS,
        allow_special_flavors=raw.allow_special_flavors,
        surcharge_policy=raw.surcharge_policy,
    )


def is_complete(rule: FlavorRule, selection: Mapping[int, int]) -> bool:
    """Confirm gate: every piece has a flavor and enough distinct flavors were picked."""
    total = sum(selection.values())
    distinct = sum(1 for qty in selection.values() if qty > 0)
    return total == rule.total_units and distinct >= rule.min_flavors


def validate_selection(rule: FlavorRule, selection: Mapping[int, int], *, require_complete: bool = True) -> None:
    """
    Checks a selection that did not come from the stepper (e.g. a client payload).
    Raises FlavorSelectionError naming the first broken constraint.
    """
    for flavor_id, qty in selection.items():
        if qty < 0:
            raise FlavorSelectionError(f"Flavor {flavor_id}: quantity cannot be negative")
        if qty % rule.units_per_flavor != 0:
            raise FlavorSelectionError(
                f"Flavor {flavor_id}: quantity must be a multiple of {rule.units_per_flavor} pieces"
            )

    total = sum(selection.values())
    if total > rule.total_units:
        raise FlavorSelectionError(f"Selected {total} pieces but only {rule.total_units} are allowed")

    distinct = sum(1 for qty in selection.values() if qty > 0)
    if distinct > rule.max_flavors:
        raise FlavorSelectionError(f"Pick at most {rule.max_flavors} flavors")

    if require_complete and not is_complete(rule, selection):
        if total < rule.total_units:
            raise IncompleteSelectionError(f"Select {rule.total_units - total} more pieces")
        raise IncompleteSelectionError(f"Pick at least {rule.min_flavors} flavors")


def check_flavor_allowed(rule: FlavorRule, flavor: FlavorDTO) -> None:
    if not flavor.is_active or not flavor.is_available:
        raise FlavorSelectionError(f"{flavor.name} is not available right now")
    if flavor.is_special and not rule.allow_special_flavors:
        raise FlavorSelectionError(f"{flavor.name} cannot be chosen for this product")


class FlavorSelection:
    """
    Slot stepper for one flavored line.

    Quantities move in steps of `units_per_flavor`, so every value stays a
    multiple of the slot size, the sum never passes `total_units`, and at most
    `max_flavors` flavors are ever present. A flavor stepped down to zero is
    dropped from the mapping.
    """

    def __init__(self, rule: FlavorRule, flavors: Iterable[FlavorDTO]):
        self.rule = rule
        self._flavors: Dict[int, FlavorDTO] = {f.id: f for f in flavors}
        self._quantities: Dict[int, int] = {}

    @property
    def quantities(self) -> Dict[int, int]:
        return dict(self._quantities)

    @property
    def total_selected(self) -> int:
        return sum(self._quantities.values())

    @property
    def distinct_count(self) -> int:
        return len(self._quantities)

    @property
    def is_complete(self) -> bool:
        return is_complete(self.rule, self._quantities)

    def _flavor(self, flavor_id: int) -> FlavorDTO:
        flavor = self._flavors.get(flavor_id)
        if flavor is None:
            raise FlavorSelectionError(f"Flavor {flavor_id} is not offered for this product")
        return flavor

    def can_increment(self, flavor_id: int) -> bool:
        if self.total_selected + self.rule.units_per_flavor > self.rule.total_units:
            return False
        if flavor_id not in self._quantities and self.distinct_count >= self.rule.max_flavors:
            return False
        return True

    def increment(self, flavor_id: int) -> Dict[int, int]:
        flavor = self._flavor(flavor_id)
        check_flavor_allowed(self.rule, flavor)
        if self.total_selected + self.rule.units_per_flavor > self.rule.total_units:
            raise FlavorSelectionError(f"All {self.rule.total_units} pieces already have a flavor")
        if flavor_id not in self._quantities and self.distinct_count >= self.rule.max_flavors:
            raise FlavorSelectionError(f"Pick at most {self.rule.max_flavors} flavors")

        self._quantities[flavor_id] = self._quantities.get(flavor_id, 0) + self.rule.units_per_flavor
        return self.quantities

    def decrement(self, flavor_id: int) -> Dict[int, int]:
        current = self._quantities.get(flavor_id, 0)
        new_value = max(0, current - self.rule.units_per_flavor)
        if new_value == 0:
            self._quantities.pop(flavor_id, None)
        else:
            self._quantities[flavor_id] = new_value
        return self.quantities

    def choose(self, flavor_id: int) -> Dict[int, int]:
        """Single-select mode: replaces the current choice."""
        if not self.rule.single_select:
            raise FlavorSelectionError("This product uses the flavor stepper")
        flavor = self._flavor(flavor_id)
        check_flavor_allowed(self.rule, flavor)
        self._quantities = {flavor_id: 1}
        return self.quantities

    def confirm(self) -> List[FlavorDTO]:
        """Flavors in selection order. Raises IncompleteSelectionError while the gate is closed."""
        if not self.is_complete:
            validate_selection(self.rule, self._quantities)
        return [self._flavors[fid] for fid in self._quantities]
