from typing import Callable, Dict

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.catalog.adapters.catalog_adapter import CatalogAdapter
from app.api.catalog.contracts.catalog_contract import ICatalogContract, ProductDTO
from app.api.catalog.services.service_catalog import default_surcharge_policy
from app.api.cart.core.cart import Cart, CartLineItem
from app.api.cart.core.cart_store import CartSessionStore
from app.api.cart.core.exceptions import CartError, CartLineNotFoundError, FlavorSelectionError
from app.api.cart.core.flavor_rules import resolve, validate_selection
from app.api.cart.core.surcharge import calculate_surcharge
from app.api.cart.repositories.repo_cart_snapshot import CartSnapshotRepository
from app.api.cart.schemas.schema_cart import (
    AddBundleItemRequest,
    AddFlavoredItemRequest,
    AddSimpleItemRequest,
    CartFlavorResponse,
    CartLineResponse,
    CartResponse,
    FlavorQuantityRequest,
    FlavorSelectionPreviewRequest,
    FlavorSelectionPreviewResponse,
    UpdateQuantityRequest,
)
from app.config.settings import CART_EXPIRY_HOURS
from app.utils.logger import logger


def selection_from_request(flavors: list[FlavorQuantityRequest]) -> Dict[int, int]:
    """Merges repeated flavor ids and drops zero quantities."""
    selection: Dict[int, int] = {}
    for item in flavors:
        if item.quantity > 0:
            selection[item.flavor_id] = selection.get(item.flavor_id, 0) + item.quantity
    return selection


def line_response(line: CartLineItem) -> CartLineResponse:
    return CartLineResponse(
        id=line.id,
        product_id=line.product.id,
        product_name=line.product.name,
        product_type=line.product.product_type,
        unit_price=line.unit_price,
        quantity=line.quantity,
        flavors=[
            CartFlavorResponse(id=f.id, name=f.name, quantity=f.quantity, surcharge=f.surcharge)
            for f in line.flavors
        ],
        line_total=line.line_total,
    )


class CartService:
    """Cart operations for one browser session, persisted after every mutation."""

    def __init__(
        self,
        db: Session,
        catalog: ICatalogContract | None = None,
        store: CartSessionStore | None = None,
    ):
        self.db = db
        self.catalog: ICatalogContract = catalog or CatalogAdapter(db)
        self.default_policy = default_surcharge_policy(db)
        self.store = store or CartSessionStore(
            CartSnapshotRepository(db),
            expiry_hours=CART_EXPIRY_HOURS,
            default_policy=self.default_policy,
        )

    def _product_or_404(self, product_id: int) -> ProductDTO:
        product = self.catalog.get_product(product_id)
        if not product or not product.is_active:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Product not found")
        return product

    def _response(self, session_id: str, cart: Cart, welcome_back: bool = False) -> CartResponse:
        return CartResponse(
            session_id=session_id,
            items=[line_response(line) for line in cart.lines],
            subtotal=cart.subtotal,
            item_count=cart.item_count,
            welcome_back=welcome_back,
        )

    def _mutate(self, session_id: str, action: Callable[[Cart], object]) -> CartResponse:
        cart, _ = self.store.load(session_id)
        try:
            action(cart)
        except CartLineNotFoundError as e:
            raise HTTPException(status.HTTP_404_NOT_FOUND, str(e))
        except CartError as e:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))
        self.store.save(session_id, cart)
        return self._response(session_id, cart)

    # ── operations ─────────────────────────────────────────

    def get_cart(self, session_id: str) -> CartResponse:
        cart, welcome_back = self.store.load(session_id)
        return self._response(session_id, cart, welcome_back)

    def add_simple(self, session_id: str, req: AddSimpleItemRequest) -> CartResponse:
        product = self._product_or_404(req.product_id)
        logger.info(f"[Cart] Add simple - session={session_id} product={product.id}")
        return self._mutate(session_id, lambda cart: cart.add_simple(product))

    def add_flavored(self, session_id: str, req: AddFlavoredItemRequest) -> CartResponse:
        product = self._product_or_404(req.product_id)
        if not product.is_flavored:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, f"{product.name} does not take flavors")

        selection = selection_from_request(req.flavors)
        flavors = self.catalog.get_flavors(selection.keys())
        logger.info(f"[Cart] Add flavored - session={session_id} product={product.id} selection={selection}")
        return self._mutate(session_id, lambda cart: cart.add_flavored(product, selection, flavors))

    def add_bundle(self, session_id: str, req: AddBundleItemRequest) -> CartResponse:
        product = self._product_or_404(req.product_id)
        choices = {c.component_id: c.flavor_id for c in req.choices}
        flavors = self.catalog.get_flavors(choices.values())
        logger.info(f"[Cart] Add bundle - session={session_id} product={product.id} choices={choices}")
        return self._mutate(session_id, lambda cart: cart.add_bundle(product, choices, flavors))

    def update_quantity(self, session_id: str, line_id: str, req: UpdateQuantityRequest) -> CartResponse:
        logger.info(f"[Cart] Update quantity - session={session_id} line={line_id} delta={req.delta}")
        return self._mutate(session_id, lambda cart: cart.update_quantity(line_id, req.delta))

    def remove_line(self, session_id: str, line_id: str) -> CartResponse:
        return self._mutate(session_id, lambda cart: cart.remove(line_id))

    def clear(self, session_id: str) -> CartResponse:
        logger.info(f"[Cart] Clear - session={session_id}")
        self.store.clear(session_id)
        return self._response(session_id, Cart())

    def preview_selection(self, req: FlavorSelectionPreviewRequest) -> FlavorSelectionPreviewResponse:
        """Completion gate and surcharge for a selection in progress. Nothing is stored."""
        product = self._product_or_404(req.product_id)
        rule = resolve(product)
        selection = selection_from_request(req.flavors)
        flavors = self.catalog.get_flavors(selection.keys())

        message = None
        try:
            validate_selection(rule, selection, require_complete=False)
            result = calculate_surcharge(
                rule=rule,
                selection=selection,
                flavors=flavors,
                default_policy=self.default_policy,
            )
        except FlavorSelectionError as e:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))

        try:
            validate_selection(rule, selection)
        except FlavorSelectionError as e:
            message = str(e)

        return FlavorSelectionPreviewResponse(
            is_complete=message is None,
            total_selected=sum(selection.values()),
            total_units=rule.total_units,
            min_flavors=rule.min_flavors,
            max_flavors=rule.max_flavors,
            surcharge=result.total,
            surcharge_policy=result.policy.value,
            flavors=[
                CartFlavorResponse(id=c.id, name=c.name, quantity=c.quantity, surcharge=c.surcharge)
                for c in result.charges
            ],
            message=message,
        )
