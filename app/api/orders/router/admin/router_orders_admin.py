from fastapi import APIRouter, Body, Depends, Path

from app.api.orders.schemas.schema_order import OrderResponse, UpdateOrderStatusRequest
from app.api.orders.services.dependencies import get_order_status_service
from app.api.orders.services.service_order_status import OrderStatusService
from app.core.admin_dependencies import require_admin

router = APIRouter(
    prefix="/api/orders/admin",
    tags=["Admin - Orders"],
    dependencies=[Depends(require_admin)],
)


@router.get("/{order_id:int}", response_model=OrderResponse)
def get_order(
    order_id: int = Path(..., gt=0),
    svc: OrderStatusService = Depends(get_order_status_service),
):
    return svc.get(order_id)


@router.patch(
    "/{order_id:int}/status",
    response_model=OrderResponse,
    summary="Update order status",
    description="Moves the order along its lifecycle. Transitions not allowed from the current status return 409.",
)
def update_order_status(
    order_id: int = Path(..., description="Order ID", gt=0),
    body: UpdateOrderStatusRequest = Body(...),
    svc: OrderStatusService = Depends(get_order_status_service),
    current_user: dict = Depends(require_admin),
):
    return svc.update_status(
        order_id,
        body.status,
        internal_notes=body.internal_notes,
        changed_by=current_user.get("sub"),
    )
