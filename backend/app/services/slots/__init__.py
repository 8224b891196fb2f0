# backend/app/services/slots/__init__.py
"""
Slot inventory module.

Slots are generated per provider and date on a fixed step grid.
Availability is derived from blocked flags and active bookings on every read.
"""

from .config import BookingConfig, get_booking_config, format_time
from .inventory import (
    parse_date,
    generate_slots,
    set_blocked,
    delete_slot,
    list_available,
    list_day,
)

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "format_time",
    "parse_date",
    "generate_slots",
    "set_blocked",
    "delete_slot",
    "list_available",
    "list_day",
]
