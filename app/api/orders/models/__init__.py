from .model_customer import CustomerModel
from .model_order import OrderModel, OrderType, PaymentMethod
from .model_order_item import OrderItemModel
from .model_order_item_flavor import OrderItemFlavorModel
from .model_payment_proof import PaymentProofModel

__all__ = [
    "CustomerModel",
    "OrderModel",
    "OrderType",
    "PaymentMethod",
    "OrderItemModel",
    "OrderItemFlavorModel",
    "PaymentProofModel",
]
