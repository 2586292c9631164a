from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from app.api.orders.models.model_order import OrderModel
from app.api.orders.models.model_order_item import OrderItemModel
from app.api.orders.models.model_order_item_flavor import OrderItemFlavorModel
from app.api.orders.models.model_payment_proof import PaymentProofModel


class OrderRepository:
    """Orders and their item/flavor/proof rows. Never commits: the caller owns the transaction."""

    def __init__(self, db: Session):
        self.db = db

    # ── reads ──────────────────────────────────────────────

    def get_by_id(self, order_id: int) -> Optional[OrderModel]:
        return (
            self.db.query(OrderModel)
            .options(
                selectinload(OrderModel.items).selectinload(OrderItemModel.flavors),
                selectinload(OrderModel.payment_proofs),
            )
            .filter(OrderModel.id == order_id)
            .first()
        )

    def get_by_number(self, order_number: str) -> Optional[OrderModel]:
        return (
            self.db.query(OrderModel)
            .options(selectinload(OrderModel.items).selectinload(OrderItemModel.flavors))
            .filter(OrderModel.order_number == order_number)
            .first()
        )

    def number_exists(self, order_number: str) -> bool:
        return self.db.query(OrderModel.id).filter(OrderModel.order_number == order_number).first() is not None

    def list_by_customer(self, customer_id: int) -> List[OrderModel]:
        return (
            self.db.query(OrderModel)
            .filter(OrderModel.customer_id == customer_id)
            .order_by(OrderModel.created_at.desc())
            .all()
        )

    # ── writes ─────────────────────────────────────────────

    def create_order(self, **data) -> OrderModel:
        obj = OrderModel(**data)
        self.db.add(obj)
        self.db.flush()
        return obj

    def add_item(self, order: OrderModel, **data) -> OrderItemModel:
        obj = OrderItemModel(order_id=order.id, **data)
        self.db.add(obj)
        self.db.flush()
        return obj

    def add_item_flavor(self, item: OrderItemModel, **data) -> OrderItemFlavorModel:
        obj = OrderItemFlavorModel(order_item_id=item.id, **data)
        self.db.add(obj)
        self.db.flush()
        return obj

    def add_payment_proof(self, order: OrderModel, image_url: str) -> PaymentProofModel:
        obj = PaymentProofModel(order_id=order.id, image_url=image_url)
        self.db.add(obj)
        self.db.flush()
        return obj
