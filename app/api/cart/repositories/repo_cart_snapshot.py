from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.api.cart.core.cart_store import CartSnapshot, ICartSnapshotBackend
from app.api.cart.models.model_cart_snapshot import CartSnapshotModel


class CartSnapshotRepository(ICartSnapshotBackend):
    """Snapshot backend on the `cart_snapshots` table."""

    def __init__(self, db: Session):
        self.db = db

    def _row(self, session_id: str) -> Optional[CartSnapshotModel]:
        return self.db.query(CartSnapshotModel).filter_by(session_id=session_id).first()

    def get(self, session_id: str) -> Optional[CartSnapshot]:
        row = self._row(session_id)
        if row is None:
            return None
        return CartSnapshot(
            session_id=row.session_id,
            items=list(row.items or []),
            saved_at=row.saved_at,
            welcome_shown=bool(row.welcome_shown),
        )

    def put(self, session_id: str, items: List[dict], saved_at: datetime) -> None:
        row = self._row(session_id)
        if row is None:
            row = CartSnapshotModel(session_id=session_id, welcome_shown=False)
            self.db.add(row)
        row.items = items
        row.saved_at = saved_at
        self.db.flush()

    def delete(self, session_id: str) -> None:
        self.db.query(CartSnapshotModel).filter_by(session_id=session_id).delete()
        self.db.flush()

    def mark_welcome_shown(self, session_id: str) -> None:
        row = self._row(session_id)
        if row is not None:
            row.welcome_shown = True
            self.db.flush()
