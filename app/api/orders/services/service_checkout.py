"""
Checkout: turns a cart into an order.

Everything that can be rejected is checked before the first write. The
customer, order, item, flavor and payment proof rows are then written in one
transaction, so a failure part way through leaves nothing behind.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.api.cart.core.cart import Cart, CartLineItem
from app.api.cart.core.cart_store import CartSessionStore
from app.api.cart.core.exceptions import CartError
from app.api.cart.core.surcharge import money
from app.api.cart.repositories.repo_cart_snapshot import CartSnapshotRepository
from app.api.cart.services.service_cart import selection_from_request
from app.api.catalog.adapters.catalog_adapter import CatalogAdapter
from app.api.catalog.contracts.catalog_contract import ICatalogContract
from app.api.catalog.services.service_catalog import default_surcharge_policy
from app.api.delivery.core.delivery_fee import DeliveryQuote
from app.api.delivery.services.service_delivery_fee import DeliveryFeeService
from app.api.notifications.services.service_order_notification import OrderNotificationService
from app.api.orders.core.order_number import generate_order_number
from app.api.orders.core.order_status import initial_status
from app.api.orders.models.model_order import OrderModel, OrderType
from app.api.orders.repositories.repo_customer import CustomerRepository
from app.api.orders.repositories.repo_order import OrderRepository
from app.api.orders.schemas.schema_order import CheckoutRequest
from app.api.recovery.services.service_recovery import RecoveryService
from app.config.settings import CART_EXPIRY_HOURS, PAYMENT_PROOFS_BUCKET
from app.utils.database_utils import now_trimmed
from app.utils.logger import logger
from app.utils.minio_client import MinioUploader, extension_for
from app.utils.phone import is_valid_phone
from app.utils.prometheus_metrics import orders_created_total

CHECKOUT_FAILED = "Failed to place order. Please try again."
_ORDER_NUMBER_ATTEMPTS = 5


@dataclass
class _Fulfilment:
    delivery_fee: Optional[Decimal] = None
    distance_km: Optional[Decimal] = None
    address: Optional[str] = None


class CheckoutService:
    def __init__(
        self,
        db: Session,
        *,
        delivery: Optional[DeliveryFeeService] = None,
        uploader: Optional[MinioUploader] = None,
        catalog: Optional[ICatalogContract] = None,
        store: Optional[CartSessionStore] = None,
        clock: Callable[[], datetime] = now_trimmed,
    ):
        self.db = db
        self.delivery = delivery
        self.uploader = uploader or MinioUploader()
        self.catalog = catalog or CatalogAdapter(db)
        self.default_policy = default_surcharge_policy(db)
        self.store = store or CartSessionStore(
            CartSnapshotRepository(db),
            expiry_hours=CART_EXPIRY_HOURS,
            default_policy=self.default_policy,
        )
        self.clock = clock
        self.orders = OrderRepository(db)
        self.customers = CustomerRepository(db)
        self.notifications = OrderNotificationService(db, clock=clock)

    # ── validation ─────────────────────────────────────────

    def _validate_contact(self, req: CheckoutRequest) -> None:
        if not req.customer_name:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Please enter your name")
        if not req.customer_phone:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Please enter your phone number")
        if not is_valid_phone(req.customer_phone):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Please enter a valid mobile number (09XXXXXXXXX)")

    def _validate_payment(self, req: CheckoutRequest, payment_proof: Optional[UploadFile]) -> None:
        if req.payment_method.requires_proof and payment_proof is None:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                f"Please upload your {req.payment_method.value} payment screenshot",
            )

    def build_cart(self, req: CheckoutRequest) -> Cart:
        """Rebuilds the cart from current catalog prices, flavor surcharges and rules."""
        if not req.items:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Your cart is empty")

        products = self.catalog.get_products(item.product_id for item in req.items)
        flavor_ids = set()
        for item in req.items:
            flavor_ids.update(f.flavor_id for f in item.flavors)
            flavor_ids.update(c.flavor_id for c in item.choices)
        flavors = self.catalog.get_flavors(flavor_ids)

        cart = Cart(default_policy=self.default_policy)
        for item in req.items:
            product = products.get(item.product_id)
            if product is None or not product.is_active:
                raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Product {item.product_id} is no longer available")
            try:
                if product.is_bundle:
                    line = cart.add_bundle(product, {c.component_id: c.flavor_id for c in item.choices}, flavors)
                elif product.is_flavored:
                    line = cart.add_flavored(product, selection_from_request(item.flavors), flavors)
                else:
                    line = cart.add_simple(product)
                # the add above put exactly one unit on the line
                if item.quantity > 1:
                    cart.update_quantity(line.id, item.quantity - 1)
            except CartError as e:
                raise HTTPException(status.HTTP_400_BAD_REQUEST, f"{product.name}: {e}")
        return cart

    def _fulfilment(self, req: CheckoutRequest) -> _Fulfilment:
        if req.order_type == OrderType.DELIVERY:
            if req.delivery is None:
                raise HTTPException(status.HTTP_400_BAD_REQUEST, "Please enter your delivery address")
            if self.delivery is None:
                raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Delivery is not available")
            quote: DeliveryQuote = self.delivery.quote(req.delivery)
            return _Fulfilment(
                delivery_fee=quote.delivery_fee,
                distance_km=quote.distance_km,
                address=self._delivery_address(req),
            )

        if req.order_type == OrderType.PICKUP and (req.pickup_date is None or not req.pickup_time):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Please choose a pickup date and time")
        return _Fulfilment()

    @staticmethod
    def _delivery_address(req: CheckoutRequest) -> str:
        d = req.delivery
        address = ", ".join(p.strip() for p in (d.street_address, d.barangay, d.city) if p and p.strip())
        if d.landmark and d.landmark.strip():
            address += f" (Landmark: {d.landmark.strip()})"
        return address

    # ── writes ─────────────────────────────────────────────

    def _new_order_number(self) -> str:
        now = self.clock()
        for _ in range(_ORDER_NUMBER_ATTEMPTS):
            number = generate_order_number(now)
            if not self.orders.number_exists(number):
                return number
        raise RuntimeError("Could not allocate an order number")

    def _write_line(self, order: OrderModel, line: CartLineItem) -> None:
        unit_price = money(line.product.price)
        item = self.orders.add_item(
            order,
            product_id=line.product.id,
            product_name=line.product.name,
            product_sku=line.product.sku,
            quantity=line.quantity,
            unit_price=unit_price,
            subtotal=money(unit_price * line.quantity),
            flavor_surcharge_total=money(line.flavor_surcharge_total * line.quantity),
            line_total=line.line_total,
        )
        for charge in line.flavors:
            self.orders.add_item_flavor(
                item,
                flavor_id=charge.id,
                flavor_name=charge.name,
                quantity=charge.quantity,
                surcharge_applied=charge.surcharge,
            )

    def _attach_proof(self, order: OrderModel, payment_proof: UploadFile) -> str:
        ext = extension_for(payment_proof.content_type, payment_proof.filename)
        url = self.uploader.upload(
            PAYMENT_PROOFS_BUCKET,
            f"{order.id}.{ext}",
            payment_proof.file,
            payment_proof.content_type,
        )
        self.orders.add_payment_proof(order, url)
        return url

    # ── entry point ────────────────────────────────────────

    def checkout(self, req: CheckoutRequest, payment_proof: Optional[UploadFile] = None) -> OrderModel:
        self._validate_contact(req)
        self._validate_payment(req, payment_proof)
        cart = self.build_cart(req)
        fulfilment = self._fulfilment(req)

        subtotal = cart.subtotal
        total = money(subtotal + (fulfilment.delivery_fee or Decimal("0")))
        now = self.clock()

        uploaded_url: Optional[str] = None
        try:
            customer = self.customers.find_or_create(
                name=req.customer_name,
                phone=req.customer_phone,
                email=req.customer_email,
            )
            order = self.orders.create_order(
                order_number=self._new_order_number(),
                customer_id=customer.id,
                order_type=req.order_type,
                status=initial_status(payment_proof is not None),
                payment_method=req.payment_method,
                subtotal=subtotal,
                delivery_fee=fulfilment.delivery_fee,
                delivery_distance_km=fulfilment.distance_km,
                total_amount=total,
                delivery_address=fulfilment.address,
                pickup_date=req.pickup_date,
                pickup_time=req.pickup_time,
                notes=req.notes,
                status_changed_at=now,
                created_at=now,
            )
            for line in cart.lines:
                self._write_line(order, line)

            if payment_proof is not None:
                uploaded_url = self._attach_proof(order, payment_proof)

            customer.total_orders = (customer.total_orders or 0) + 1
            customer.total_spent = money((customer.total_spent or 0) + total)
            customer.last_order_date = now
            self.notifications.order_created(order, customer)

            if req.recover_id is not None:
                RecoveryService(self.db, clock=self.clock).mark_recovered(req.recover_id, order.id)
            if req.session_id:
                self.store.clear(req.session_id)

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            if uploaded_url:
                self.uploader.remove(uploaded_url)
            logger.error(f"[Checkout] Failed, nothing was saved: {e}")
            raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, CHECKOUT_FAILED)

        orders_created_total.labels(
            order_type=req.order_type.value,
            payment_method=req.payment_method.value,
        ).inc()
        logger.info(
            f"[Checkout] Order {order.order_number} created - type={req.order_type.value} "
            f"items={cart.item_count} total={total} status={order.status.value}"
        )
        self.db.refresh(order)
        return order
