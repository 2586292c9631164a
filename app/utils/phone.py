import re
from typing import List, Optional


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalizes a Philippine mobile number to the 63XXXXXXXXXX form.

    Accepted input:
    - 09XXXXXXXXX  (local, 11 digits)
    - 9XXXXXXXXX   (local without trunk prefix, 10 digits)
    - 639XXXXXXXXX / +63 9XX XXX XXXX (international)

    Anything else is returned as bare digits so the caller can reject it.
    """
    if phone is None:
        return None

    digits = re.sub(r"[^\d]", "", phone)
    if not digits:
        return digits

    if digits.startswith("63") and len(digits) == 12:
        return digits
    if digits.startswith("0") and len(digits) == 11:
        return "63" + digits[1:]
    if digits.startswith("9") and len(digits) == 10:
        return "63" + digits

    return digits


def is_valid_phone(phone: Optional[str]) -> bool:
    if not phone:
        return False
    digits = re.sub(r"[^\d]", "", phone)
    if digits.startswith("09") and len(digits) == 11:
        return True
    if digits.startswith("9") and len(digits) == 10:
        return True
    return digits.startswith("63") and len(digits) == 12


def phone_variants_for_lookup(phone: Optional[str]) -> List[str]:
    """
    Formats a stored number may have been saved in, used when matching customers.
    Older rows keep the 09 local form.
    """
    normalized = normalize_phone(phone)
    if not normalized:
        return []
    out = [normalized]
    if normalized.startswith("63") and len(normalized) == 12:
        local = "0" + normalized[2:]
        out.append(local)
        out.append(normalized[2:])
    return out
