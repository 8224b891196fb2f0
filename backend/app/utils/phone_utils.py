# backend/app/utils/phone_utils.py
"""
Phone helpers shared by the reservation path and the notification channels.

Reservation validates the number as the client typed it (regional mobile
format). Channels need the international form: +<country><number>.
"""

import re

from ..config import settings


def clean_phone(phone: str) -> str:
    """Drop whitespace only; keeps what the client typed otherwise."""
    return re.sub(r"\s", "", phone or "")


def is_valid_phone(phone: str, pattern: str | None = None) -> bool:
    """Check a cleaned phone against the regional pattern."""
    pattern = pattern or settings.phone_pattern
    return bool(re.match(pattern, phone or ""))


def normalize_phone(phone: str, country_code: str | None = None) -> str:
    """
    Normalize to international format.

    '0912345678'    → '+963912345678'
    '912345678'     → '+963912345678'
    '+963912345678' → '+963912345678'
    """
    country_code = country_code or settings.default_country_code
    digits = re.sub(r"\D", "", phone or "")

    if digits.startswith("0"):
        digits = country_code + digits[1:]
    elif not digits.startswith(country_code):
        digits = country_code + digits

    return "+" + digits
