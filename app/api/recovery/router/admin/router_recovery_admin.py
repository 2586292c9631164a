import asyncio
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query

from app.api.recovery.models.model_abandoned_checkout import AbandonedCheckoutStatus
from app.api.recovery.schemas.schema_recovery import (
    AbandonedCheckoutResponse,
    ManualReminderRequest,
    ProcessRemindersResponse,
    ReminderResponse,
    StartRecoveryResponse,
)
from app.api.recovery.services.dependencies import get_recovery_service
from app.api.recovery.services.service_recovery import RecoveryService
from app.core.admin_dependencies import require_admin

router = APIRouter(
    prefix="/api/recovery/admin",
    tags=["Admin - Cart Recovery"],
    dependencies=[Depends(require_admin)],
)


@router.get("/abandoned-checkouts", response_model=List[AbandonedCheckoutResponse])
def list_abandoned_checkouts(
    status_filter: Optional[AbandonedCheckoutStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    svc: RecoveryService = Depends(get_recovery_service),
):
    return svc.list_checkouts(status_filter.value if status_filter else None, limit)


@router.post(
    "/abandoned-checkouts/{checkout_id:int}/start",
    response_model=StartRecoveryResponse,
    summary="Schedule recovery reminders",
    description="Schedules up to three reminders inside reminder hours. 409 when recovery already started or finished.",
)
def start_recovery(
    checkout_id: int = Path(..., gt=0),
    svc: RecoveryService = Depends(get_recovery_service),
):
    return svc.start_recovery(checkout_id)


@router.post("/abandoned-checkouts/{checkout_id:int}/send", response_model=ReminderResponse)
def send_manual_reminder(
    checkout_id: int = Path(..., gt=0),
    body: ManualReminderRequest = Body(...),
    svc: RecoveryService = Depends(get_recovery_service),
):
    return asyncio.run(svc.send_manual(checkout_id, body.channel))


@router.post(
    "/reminders/process",
    response_model=ProcessRemindersResponse,
    summary="Send due reminders",
    description="Meant to be called by a scheduler every few minutes. Does nothing outside reminder hours.",
)
def process_due_reminders(svc: RecoveryService = Depends(get_recovery_service)):
    # runs in the threadpool; asyncio.run drives the channel sends
    return asyncio.run(svc.process_due_reminders())
