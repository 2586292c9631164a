from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from app.api.cart.schemas.schema_cart import (
    AddBundleItemRequest,
    AddFlavoredItemRequest,
    AddSimpleItemRequest,
    CartResponse,
    FlavorSelectionPreviewRequest,
    FlavorSelectionPreviewResponse,
    UpdateQuantityRequest,
)
from app.api.cart.services.service_cart import CartService
from app.database.db_connection import get_db

router = APIRouter(
    prefix="/api/cart",
    tags=["Client - Cart"],
)

SESSION_ID = Path(..., min_length=8, max_length=64, description="Browser session id")


@router.post("/flavor-selection/validate", response_model=FlavorSelectionPreviewResponse)
def preview_flavor_selection(req: FlavorSelectionPreviewRequest, db: Session = Depends(get_db)):
    """Tells whether a selection can be confirmed and what it adds to the price."""
    return CartService(db).preview_selection(req)


@router.get("/{session_id}", response_model=CartResponse)
def get_cart(session_id: str = SESSION_ID, db: Session = Depends(get_db)):
    return CartService(db).get_cart(session_id)


@router.post("/{session_id}/items/simple", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
def add_simple_item(req: AddSimpleItemRequest, session_id: str = SESSION_ID, db: Session = Depends(get_db)):
    return CartService(db).add_simple(session_id, req)


@router.post("/{session_id}/items/flavored", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
def add_flavored_item(req: AddFlavoredItemRequest, session_id: str = SESSION_ID, db: Session = Depends(get_db)):
    return CartService(db).add_flavored(session_id, req)


@router.post("/{session_id}/items/bundle", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
def add_bundle_item(req: AddBundleItemRequest, session_id: str = SESSION_ID, db: Session = Depends(get_db)):
    return CartService(db).add_bundle(session_id, req)


@router.patch("/{session_id}/items/{line_id}", response_model=CartResponse)
def update_item_quantity(
    req: UpdateQuantityRequest,
    session_id: str = SESSION_ID,
    line_id: str = Path(..., description="Cart line id"),
    db: Session = Depends(get_db),
):
    return CartService(db).update_quantity(session_id, line_id, req)


@router.delete("/{session_id}/items/{line_id}", response_model=CartResponse)
def remove_item(
    session_id: str = SESSION_ID,
    line_id: str = Path(..., description="Cart line id"),
    db: Session = Depends(get_db),
):
    return CartService(db).remove_line(session_id, line_id)


@router.delete("/{session_id}", response_model=CartResponse)
def clear_cart(session_id: str = SESSION_ID, db: Session = Depends(get_db)):
    return CartService(db).clear(session_id)
