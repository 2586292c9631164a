import secrets
from datetime import datetime


def generate_order_number(now: datetime) -> str:
    """ARW-YYYYMMDD-XXXX. Collisions are retried by the caller."""
    return f"ARW-{now:%Y%m%d}-{secrets.randbelow(10000):04d}"
