from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Mapping, Optional

from app.api.catalog.contracts.catalog_contract import FlavorDTO
from app.api.cart.core.exceptions import FlavorSelectionError
from app.api.cart.core.flavor_rules import FlavorRule

CENT = Decimal("0.01")


def money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


class SurchargePolicy(str, Enum):
    """How special flavors add to a flavored line's price."""
    PER_SLOT = "per_slot"
    PER_DISTINCT_FLAVOR = "per_distinct_flavor"
    PER_UNIT_RATIO = "per_unit_ratio"

    @classmethod
    def parse(cls, value: Optional[str], default: "SurchargePolicy | str" = "per_slot") -> "SurchargePolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(value) if value else cls(default)
        except ValueError:
            return cls(default)


class SurchargeStrategy(ABC):
    @abstractmethod
    def contribution(self, flavor: FlavorDTO, quantity: int, units_per_flavor: int) -> Decimal:
        """Amount one selected flavor adds to the line."""
        raise NotImplementedError


class PerSlotSurcharge(SurchargeStrategy):
    """Surcharge once per slot the flavor fills. 6 pcs of a ₱40 flavor in 3-pc slots = ₱80."""

    def contribution(self, flavor: FlavorDTO, quantity: int, units_per_flavor: int) -> Decimal:
        if quantity <= 0:
            return Decimal("0")
        if quantity % units_per_flavor != 0:
            raise FlavorSelectionError(
                f"{flavor.name}: {quantity} pieces do not fill whole {units_per_flavor}-piece slots"
            )
        return flavor.effective_surcharge * (quantity // units_per_flavor)


class PerDistinctFlavorSurcharge(SurchargeStrategy):
    """Flat surcharge per distinct flavor, whatever the piece count."""

    def contribution(self, flavor: FlavorDTO, quantity: int, units_per_flavor: int) -> Decimal:
        if quantity <= 0:
            return Decimal("0")
        return flavor.effective_surcharge


class PerUnitRatioSurcharge(SurchargeStrategy):
    """surcharge × quantity / units_per_flavor with no slot check; the ratio may be fractional."""

    def contribution(self, flavor: FlavorDTO, quantity: int, units_per_flavor: int) -> Decimal:
        if quantity <= 0:
            return Decimal("0")
        return flavor.effective_surcharge * Decimal(quantity) / Decimal(units_per_flavor)


STRATEGIES: Dict[SurchargePolicy, SurchargeStrategy] = {
    SurchargePolicy.PER_SLOT: PerSlotSurcharge(),
    SurchargePolicy.PER_DISTINCT_FLAVOR: PerDistinctFlavorSurcharge(),
    SurchargePolicy.PER_UNIT_RATIO: PerUnitRatioSurcharge(),
}


@dataclass(frozen=True)
class FlavorCharge:
    """A selected flavor with its resolved surcharge contribution."""
    id: int
    name: str
    quantity: int
    surcharge: Decimal

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "quantity": self.quantity, "surcharge": str(self.surcharge)}

    @classmethod
    def from_dict(cls, data: Mapping) -> "FlavorCharge":
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            quantity=int(data["quantity"]),
            surcharge=money(data.get("surcharge")),
        )


@dataclass(frozen=True)
class SurchargeResult:
    total: Decimal
    policy: SurchargePolicy
    charges: List[FlavorCharge] = field(default_factory=list)


def policy_for(rule: FlavorRule, default: "SurchargePolicy | str" = SurchargePolicy.PER_SLOT) -> SurchargePolicy:
    """The product's own policy wins over the deployment default."""
    return SurchargePolicy.parse(rule.surcharge_policy, default)


def calculate_surcharge(
    *,
    rule: FlavorRule,
    selection: Mapping[int, int],
    flavors: Mapping[int, FlavorDTO],
    policy: "SurchargePolicy | None" = None,
    default_policy: "SurchargePolicy | str" = SurchargePolicy.PER_SLOT,
) -> SurchargeResult:
    """
    Total surcharge of a flavor selection plus each flavor's share.

    Pure: depends only on the selection, the flavor catalog and the policy.
    The result is never negative.
    """
    chosen = policy or policy_for(rule, default_policy)
    strategy = STRATEGIES[chosen]

    total = Decimal("0")
    charges: List[FlavorCharge] = []
    for flavor_id, quantity in selection.items():
        if quantity <= 0:
            continue
        flavor = flavors.get(flavor_id)
        if flavor is None:
            raise FlavorSelectionError(f"Flavor {flavor_id} not found")

        amount = money(strategy.contribution(flavor, quantity, rule.units_per_flavor))
        total += amount
        charges.append(FlavorCharge(id=flavor.id, name=flavor.name, quantity=quantity, surcharge=amount))

    return SurchargeResult(total=money(max(total, Decimal("0"))), policy=chosen, charges=charges)
