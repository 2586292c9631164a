from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Iterable, List, Mapping, Optional

from app.api.catalog.contracts.catalog_contract import FlavorDTO, ProductDTO
from app.api.cart.core.exceptions import CartError, CartLineNotFoundError, FlavorSelectionError
from app.api.cart.core.flavor_rules import check_flavor_allowed, resolve, validate_selection
from app.api.cart.core.surcharge import FlavorCharge, SurchargePolicy, calculate_surcharge, money


@dataclass
class CartLineItem:
    id: str
    product: ProductDTO
    quantity: int
    flavors: List[FlavorCharge] = field(default_factory=list)
    line_total: Decimal = Decimal("0")

    @property
    def flavor_surcharge_total(self) -> Decimal:
        return money(sum((f.surcharge for f in self.flavors), Decimal("0")))

    @property
    def unit_price(self) -> Decimal:
        """Base price plus resolved flavor surcharges: the price of one of this line."""
        return money(Decimal(str(self.product.price)) + self.flavor_surcharge_total)

    def recompute(self) -> Decimal:
        self.line_total = money(self.unit_price * self.quantity)
        return self.line_total

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product": self.product.model_dump(mode="json"),
            "quantity": self.quantity,
            "flavors": [f.to_dict() for f in self.flavors],
            "lineTotal": str(self.line_total),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "CartLineItem":
        return cls(
            id=str(data["id"]),
            product=ProductDTO.model_validate(data["product"]),
            quantity=int(data["quantity"]),
            flavors=[FlavorCharge.from_dict(f) for f in data.get("flavors") or []],
            line_total=money(data.get("lineTotal")),
        )


def _new_line_id() -> str:
    return uuid.uuid4().hex


class Cart:
    """
    Ordered cart lines with derived totals.

    Every line is priced as quantity × (product price + Σ resolved flavor
    surcharge). Simple lines for the same product merge; flavored and bundle
    lines never do. Insertion order is display order.
    """

    def __init__(
        self,
        lines: Optional[Iterable[CartLineItem]] = None,
        *,
        default_policy: SurchargePolicy | str = SurchargePolicy.PER_SLOT,
        id_factory: Callable[[], str] = _new_line_id,
    ):
        self._lines: List[CartLineItem] = list(lines or [])
        self.default_policy = SurchargePolicy.parse(default_policy)
        self._id_factory = id_factory

    # ── reads ──────────────────────────────────────────────

    @property
    def lines(self) -> List[CartLineItem]:
        return list(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def subtotal(self) -> Decimal:
        return money(sum((line.line_total for line in self._lines), Decimal("0")))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def get(self, line_id: str) -> CartLineItem:
        for line in self._lines:
            if line.id == line_id:
                return line
        raise CartLineNotFoundError(line_id)

    # ── mutations ──────────────────────────────────────────

    def add_simple(self, product: ProductDTO) -> CartLineItem:
        if product.is_flavored or product.is_bundle:
            raise FlavorSelectionError(f"{product.name} needs a flavor selection")

        for line in self._lines:
            if line.product.id == product.id and not line.flavors:
                line.quantity += 1
                line.recompute()
                return line

        line = CartLineItem(id=self._id_factory(), product=product, quantity=1)
        line.recompute()
        self._lines.append(line)
        return line

    def add_flavored(
        self,
        product: ProductDTO,
        selection: Mapping[int, int],
        flavors: Mapping[int, FlavorDTO],
    ) -> CartLineItem:
        """Always a new line of quantity 1 priced at price + surcharge(selection)."""
        rule = resolve(product)
        selected = {fid: qty for fid, qty in selection.items() if qty > 0}
        validate_selection(rule, selected)
        for flavor_id in selected:
            flavor = flavors.get(flavor_id)
            if flavor is None:
                raise FlavorSelectionError(f"Flavor {flavor_id} not found")
            check_flavor_allowed(rule, flavor)

        result = calculate_surcharge(
            rule=rule,
            selection=selected,
            flavors=flavors,
            default_policy=self.default_policy,
        )
        line = CartLineItem(id=self._id_factory(), product=product, quantity=1, flavors=result.charges)
        line.recompute()
        self._lines.append(line)
        return line

    def add_bundle(
        self,
        product: ProductDTO,
        choices: Mapping[int, int],
        flavors: Mapping[int, FlavorDTO],
    ) -> CartLineItem:
        """
        One flavor per component that takes a flavor (`choices`: component id -> flavor id).
        Each chosen flavor adds its surcharge once.
        """
        if not product.is_bundle:
            raise CartError(f"{product.name} is not a bundle")

        charges: List[FlavorCharge] = []
        for component in product.bundle_components:
            if not component.has_flavor_selection:
                continue
            flavor_id = choices.get(component.id)
            if flavor_id is None:
                raise FlavorSelectionError(f"Choose a flavor for {component.component_name}")
            flavor = flavors.get(flavor_id)
            if flavor is None:
                raise FlavorSelectionError(f"Flavor {flavor_id} not found")
            if flavor.flavor_category != component.flavor_category:
                raise FlavorSelectionError(f"{flavor.name} is not offered for {component.component_name}")
            if not flavor.is_active or not flavor.is_available:
                raise FlavorSelectionError(f"{flavor.name} is not available right now")

            charges.append(
                FlavorCharge(
                    id=flavor.id,
                    name=flavor.name,
                    quantity=component.total_units or 1,
                    surcharge=money(flavor.effective_surcharge),
                )
            )

        line = CartLineItem(id=self._id_factory(), product=product, quantity=1, flavors=charges)
        line.recompute()
        self._lines.append(line)
        return line

    def update_quantity(self, line_id: str, delta: int) -> Optional[CartLineItem]:
        """
        Shifts a line's quantity by `delta`. At zero or below the line is removed
        and None is returned.
        """
        line = self.get(line_id)
        new_quantity = line.quantity + delta
        if new_quantity <= 0:
            self.remove(line_id)
            return None

        line.quantity = new_quantity
        line.recompute()
        return line

    def remove(self, line_id: str) -> bool:
        before = len(self._lines)
        self._lines = [line for line in self._lines if line.id != line_id]
        return len(self._lines) < before

    def clear(self) -> None:
        self._lines = []

    def recalculate(self) -> Decimal:
        """Reprices every line from its inputs. Safe to call any number of times."""
        for line in self._lines:
            line.recompute()
        return self.subtotal

    # ── snapshot ───────────────────────────────────────────

    def to_snapshot(self) -> List[dict]:
        return [line.to_dict() for line in self._lines]

    @classmethod
    def from_snapshot(cls, items: Iterable[Mapping], **kwargs) -> "Cart":
        cart = cls([CartLineItem.from_dict(item) for item in items], **kwargs)
        cart.recalculate()
        return cart

