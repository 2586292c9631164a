from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.api.orders.repositories.repo_order import OrderRepository
from app.api.orders.schemas.schema_order import CheckoutRequest, OrderResponse
from app.api.orders.services.dependencies import get_checkout_service
from app.api.orders.services.service_checkout import CheckoutService
from app.database.db_connection import get_db
from app.utils.logger import logger

router = APIRouter(
    prefix="/api/orders",
    tags=["Client - Orders"],
)


@router.post(
    "/checkout",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
    description="""
    Multipart form: `payload` is the checkout as a JSON string, `payment_proof`
    the GCash/bank screenshot.

    Prices and the delivery fee are recomputed on the server.
    """,
)
def checkout(
    payload: str = Form(..., description="CheckoutRequest as JSON"),
    payment_proof: Optional[UploadFile] = File(None),
    service: CheckoutService = Depends(get_checkout_service),
):
    try:
        req = CheckoutRequest.model_validate_json(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    logger.info(
        f"[Checkout] Request - type={req.order_type.value} payment={req.payment_method.value} "
        f"items={len(req.items)} proof={'yes' if payment_proof else 'no'}"
    )
    return service.checkout(req, payment_proof)


@router.get("/track/{order_number}", response_model=OrderResponse)
def track_order(
    order_number: str = Path(..., min_length=5, max_length=30),
    db: Session = Depends(get_db),
):
    order = OrderRepository(db).get_by_number(order_number.strip().upper())
    if not order:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Order not found")
    return order
