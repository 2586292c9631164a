from fastapi import APIRouter, Depends, Path, status

from app.api.recovery.schemas.schema_recovery import (
    RecoveredCartResponse,
    SaveAbandonedCheckoutRequest,
    SaveAbandonedCheckoutResponse,
)
from app.api.recovery.services.dependencies import get_recovery_service
from app.api.recovery.services.service_recovery import RecoveryService

router = APIRouter(
    prefix="/api/recovery",
    tags=["Client - Cart Recovery"],
)


@router.post(
    "/abandoned-checkouts",
    response_model=SaveAbandonedCheckoutResponse,
    status_code=status.HTTP_200_OK,
    summary="Save a checkout in progress",
)
def save_abandoned_checkout(
    req: SaveAbandonedCheckoutRequest,
    svc: RecoveryService = Depends(get_recovery_service),
):
    """Called by the order page once a phone or email is typed in. Updates the open record for the same phone/session."""
    return svc.save(req)


@router.get("/abandoned-checkouts/{checkout_id:int}/cart", response_model=RecoveredCartResponse)
def get_recovered_cart(
    checkout_id: int = Path(..., gt=0),
    svc: RecoveryService = Depends(get_recovery_service),
):
    return svc.recovered_cart(checkout_id)
