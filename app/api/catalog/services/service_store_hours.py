from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.api.catalog.repositories.repo_setting import SettingRepository
from app.api.catalog.schemas.schema_catalog import StoreStatusResponse
from app.config.settings import STORE_TIMEZONE
from app.utils.operating_hours import format_time_12h, parse_hhmm, store_is_open

STORE_HOURS_KEY = "store_hours"


class StoreHoursService:
    def __init__(self, db: Session):
        self.settings = SettingRepository(db)

    def status(self, now: Optional[datetime] = None) -> StoreStatusResponse:
        hours = self.settings.get_value(STORE_HOURS_KEY)
        is_open = store_is_open(store_hours=hours, timezone=STORE_TIMEZONE, now=now)

        opens_at = closes_at = None
        if isinstance(hours, dict):
            start = parse_hhmm(hours.get("open"))
            end = parse_hhmm(hours.get("close"))
            if start and end:
                opens_at, closes_at = format_time_12h(start), format_time_12h(end)
        return StoreStatusResponse(is_open=is_open, opens_at=opens_at, closes_at=closes_at)
