from datetime import datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

from app.api.cart.core.cart import Cart
from app.api.cart.core.cart_store import CartSessionStore, InMemoryCartSnapshotBackend
from app.api.catalog.contracts.catalog_contract import ProductDTO

RICE = ProductDTO(id=1, name="Rice Meal", price=Decimal("150"))
START = datetime(2026, 10, 17, 12, 0, tzinfo=ZoneInfo("Asia/Manila"))


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def make_store(clock):
    return CartSessionStore(InMemoryCartSnapshotBackend(), expiry_hours=72, clock=clock)


def saved_cart(store):
    cart = Cart()
    cart.add_simple(RICE)
    store.save("session-1", cart)


def test_unknown_session_gets_empty_cart():
    cart, welcome_back = make_store(Clock(START)).load("session-1")
    assert cart.is_empty
    assert not welcome_back


def test_welcome_back_only_once():
    store = make_store(Clock(START))
    saved_cart(store)

    cart, welcome_back = store.load("session-1")
    assert cart.item_count == 1
    assert welcome_back

    _, welcome_back = store.load("session-1")
    assert not welcome_back


def test_expired_snapshot_is_discarded():
    clock = Clock(START)
    store = make_store(clock)
    saved_cart(store)

    clock.now = START + timedelta(hours=73)
    cart, welcome_back = store.load("session-1")
    assert cart.is_empty
    assert not welcome_back
    assert store.backend.get("session-1") is None


def test_empty_cart_is_not_stored():
    store = make_store(Clock(START))
    saved_cart(store)
    store.save("session-1", Cart())
    assert store.backend.get("session-1") is None


def test_clear_removes_snapshot():
    store = make_store(Clock(START))
    saved_cart(store)
    store.clear("session-1")
    cart, _ = store.load("session-1")
    assert cart.is_empty


def test_snapshot_with_bad_amount_is_discarded():
    store = make_store(Clock(START))
    line = {"id": "line-1", "product": RICE.model_dump(mode="json"), "quantity": 1, "flavors": [], "lineTotal": "abc"}
    store.backend.put("session-1", [line], START)

    cart, welcome_back = store.load("session-1")
    assert cart.is_empty
    assert not welcome_back
    assert store.backend.get("session-1") is None
