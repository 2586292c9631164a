from sqlalchemy import Column, String, Boolean, DateTime, JSON

from app.database.db_connection import Base


class CartSnapshotModel(Base):
    """Persisted cart of a browser session; rows older than CART_EXPIRY_HOURS are dropped on read."""
    __tablename__ = "cart_snapshots"

    session_id = Column(String(64), primary_key=True)
    items = Column(JSON, nullable=False, default=list)
    saved_at = Column(DateTime(timezone=True), nullable=False)
    welcome_shown = Column(Boolean, nullable=False, default=False)
