from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import InvalidOperation
from threading import Lock
from typing import Callable, Dict, List, Optional, Tuple

from app.api.cart.core.cart import Cart
from app.api.cart.core.surcharge import SurchargePolicy
from app.utils.database_utils import as_store_time, now_trimmed
from app.utils.logger import logger


@dataclass
class CartSnapshot:
    session_id: str
    items: List[dict] = field(default_factory=list)
    saved_at: Optional[datetime] = None
    welcome_shown: bool = False


class ICartSnapshotBackend(ABC):
    """Where cart snapshots live between requests."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[CartSnapshot]:
        raise NotImplementedError

    @abstractmethod
    def put(self, session_id: str, items: List[dict], saved_at: datetime) -> None:
        """Insert or overwrite the items. The welcome flag of an existing snapshot is kept."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, session_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def mark_welcome_shown(self, session_id: str) -> None:
        raise NotImplementedError


class InMemoryCartSnapshotBackend(ICartSnapshotBackend):
    """Process-local snapshots, for tests and single-worker runs."""

    def __init__(self):
        self._snapshots: Dict[str, CartSnapshot] = {}
        self._lock = Lock()

    def get(self, session_id: str) -> Optional[CartSnapshot]:
        with self._lock:
            snap = self._snapshots.get(session_id)
            if snap is None:
                return None
            return CartSnapshot(snap.session_id, list(snap.items), snap.saved_at, snap.welcome_shown)

    def put(self, session_id: str, items: List[dict], saved_at: datetime) -> None:
        with self._lock:
            existing = self._snapshots.get(session_id)
            self._snapshots[session_id] = CartSnapshot(
                session_id=session_id,
                items=list(items),
                saved_at=saved_at,
                welcome_shown=existing.welcome_shown if existing else False,
            )

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._snapshots.pop(session_id, None)

    def mark_welcome_shown(self, session_id: str) -> None:
        with self._lock:
            if session_id in self._snapshots:
                self._snapshots[session_id].welcome_shown = True


class CartSessionStore:
    """
    Load-on-open / save-on-mutation lifecycle for a customer's cart.

    Snapshots older than `expiry_hours` are discarded on load. An empty cart
    is never stored. `clear` runs on explicit clear and after checkout.
    """

    def __init__(
        self,
        backend: ICartSnapshotBackend,
        *,
        expiry_hours: int = 72,
        default_policy: SurchargePolicy | str = SurchargePolicy.PER_SLOT,
        clock: Callable[[], datetime] = now_trimmed,
    ):
        self.backend = backend
        self.expiry = timedelta(hours=expiry_hours)
        self.default_policy = SurchargePolicy.parse(default_policy)
        self.clock = clock

    def _empty(self) -> Cart:
        return Cart(default_policy=self.default_policy)

    def load(self, session_id: str) -> Tuple[Cart, bool]:
        """Returns the cart and whether to greet the customer back (once per snapshot)."""
        snap = self.backend.get(session_id)
        if snap is None:
            return self._empty(), False

        if snap.saved_at is None or self.clock() - as_store_time(snap.saved_at) > self.expiry:
            logger.info(f"[CartStore] Snapshot for session {session_id} expired")
            self.backend.delete(session_id)
            return self._empty(), False

        try:
            cart = Cart.from_snapshot(snap.items, default_policy=self.default_policy)
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            logger.warning(f"[CartStore] Discarding unreadable snapshot for session {session_id}: {e}")
            self.backend.delete(session_id)
            return self._empty(), False

        welcome_back = not cart.is_empty and not snap.welcome_shown
        if welcome_back:
            self.backend.mark_welcome_shown(session_id)
        return cart, welcome_back

    def save(self, session_id: str, cart: Cart) -> None:
        if cart.is_empty:
            self.backend.delete(session_id)
            return
        self.backend.put(session_id, cart.to_snapshot(), self.clock())

    def clear(self, session_id: str) -> None:
        self.backend.delete(session_id)
