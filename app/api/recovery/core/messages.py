from decimal import Decimal
from typing import Optional, Tuple


def recovery_link(site_url: str, checkout_id: int, channel: str, campaign: str = "abandoned_cart") -> str:
    base = (site_url or "").rstrip("/")
    return (
        f"{base}/order?recover={checkout_id}"
        f"&utm_source=recovery&utm_medium={channel}&utm_campaign={campaign}"
    )


def reminder_message(customer_name: Optional[str], cart_total: Decimal, link: str) -> Tuple[str, str]:
    """(subject, body). Same short text for SMS and email."""
    name = (customer_name or "").strip() or "there"
    subject = "You left something in your cart"
    body = (
        f"Hi {name}! Your ARW order worth PHP {cart_total:,.2f} is still waiting. "
        f"Complete it here: {link}"
    )
    return subject, body
