from typing import Any, Optional

from sqlalchemy.orm import Session

from app.api.catalog.models.model_setting import SettingModel

SURCHARGE_POLICY_KEY = "surcharge_policy"


class SettingRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_value(self, key: str, default: Any = None) -> Any:
        row = self.db.query(SettingModel).filter_by(key=key).first()
        if row is None or row.value is None:
            return default
        return row.value

    def set_value(self, key: str, value: Any) -> SettingModel:
        row: Optional[SettingModel] = self.db.query(SettingModel).filter_by(key=key).first()
        if row is None:
            row = SettingModel(key=key, value=value)
            self.db.add(row)
        else:
            row.value = value
        self.db.flush()
        return row

    def surcharge_policy(self, fallback: str) -> Any:
        """
        Deployment-wide surcharge policy stored under `surcharge_policy`.
        Accepts a bare string or {"policy": "..."}; anything else gives `fallback`.
        """
        value = self.get_value(SURCHARGE_POLICY_KEY)
        if isinstance(value, dict):
            value = value.get("policy")
        return value if isinstance(value, str) and value else fallback
