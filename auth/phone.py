"""Philippine mobile number helpers."""

from __future__ import annotations

import re

PHONE_PATTERN = re.compile(r"^(09|\+639)\d{9}$")

_MASK_CHAR = "*"


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(phone.strip()))


def normalize_phone(phone: str) -> str:
    """Return the local 09XXXXXXXXX form used as the lookup key.

    Values that cannot be interpreted as a Philippine mobile number are
    returned stripped but otherwise unchanged.
    """
    cleaned = re.sub(r"\D", "", phone)
    if cleaned.startswith("639") and len(cleaned) == 12:
        return "0" + cleaned[2:]
    if cleaned.startswith("09") and len(cleaned) == 11:
        return cleaned
    if cleaned.startswith("9") and len(cleaned) == 10:
        return "0" + cleaned
    return phone.strip()


def to_international(phone: str) -> str:
    """Format a number as +63XXXXXXXXXX for display."""
    cleaned = re.sub(r"\D", "", phone)
    if cleaned.startswith("63"):
        return f"+{cleaned}"
    if cleaned.startswith("09"):
        return f"+63{cleaned[1:]}"
    if len(cleaned) == 10:
        return f"+63{cleaned}"
    return phone


def mask_phone(phone: str) -> str:
    """Keep the first and last four characters visible."""
    if len(phone) <= 8:
        return phone
    return f"{phone[:4]}{_MASK_CHAR * (len(phone) - 8)}{phone[-4:]}"
