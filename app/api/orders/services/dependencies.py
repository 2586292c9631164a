from fastapi import Depends
from sqlalchemy.orm import Session

from app.api.delivery.router.router_delivery import get_delivery_fee_service
from app.api.delivery.services.service_delivery_fee import DeliveryFeeService
from app.api.orders.services.service_checkout import CheckoutService
from app.api.orders.services.service_order_status import OrderStatusService
from app.database.db_connection import get_db
from app.utils.minio_client import MinioUploader


def get_payment_proof_uploader() -> MinioUploader:
    """Object storage for payment proofs. Overridden in tests."""
    return MinioUploader()


def get_checkout_service(
    db: Session = Depends(get_db),
    delivery: DeliveryFeeService = Depends(get_delivery_fee_service),
    uploader: MinioUploader = Depends(get_payment_proof_uploader),
) -> CheckoutService:
    return CheckoutService(db, delivery=delivery, uploader=uploader)


def get_order_status_service(db: Session = Depends(get_db)) -> OrderStatusService:
    return OrderStatusService(db)
