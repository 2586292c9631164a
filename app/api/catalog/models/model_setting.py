from sqlalchemy import Column, String, DateTime, JSON, func

from app.database.db_connection import Base


class SettingModel(Base):
    """Key/value settings (store_hours, reservation_settings, menu_pdf_url)."""
    __tablename__ = "settings"

    key = Column(String(80), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
