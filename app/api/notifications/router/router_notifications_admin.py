import asyncio
from typing import List

from fastapi import APIRouter, Depends, Path

from app.api.notifications.schemas.schema_order_notification import (
    OrderNotificationResponse,
    ProcessNotificationsResponse,
)
from app.api.notifications.services.dependencies import get_order_notification_service
from app.api.notifications.services.service_order_notification import OrderNotificationService
from app.core.admin_dependencies import require_admin

router = APIRouter(
    prefix="/api/notifications/admin",
    tags=["Admin - Notifications"],
    dependencies=[Depends(require_admin)],
)


@router.get("/orders/{order_id:int}", response_model=List[OrderNotificationResponse])
def list_order_notifications(
    order_id: int = Path(..., gt=0),
    svc: OrderNotificationService = Depends(get_order_notification_service),
):
    return svc.list_for_order(order_id)


@router.post(
    "/process",
    response_model=ProcessNotificationsResponse,
    summary="Send due order notifications",
    description="Meant to be called by a scheduler every minute. Failed sends are retried a few times, then marked failed.",
)
def process_order_notifications(svc: OrderNotificationService = Depends(get_order_notification_service)):
    # runs in the threadpool; asyncio.run drives the channel sends
    return asyncio.run(svc.process_pending())
