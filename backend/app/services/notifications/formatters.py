"""
Message texts for booking notifications.
"""

from datetime import date

from ...models.generated import Bookings, Providers
from ..slots.config import format_time


def _format_date(iso_str: str) -> str:
    """'2025-06-02' → 'Monday, June 2, 2025'."""
    try:
        d = date.fromisoformat(iso_str)
    except ValueError:
        return iso_str
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def format_confirmation(booking: Bookings, provider: Providers) -> str:
    return (
        "✅ Appointment Confirmed!\n\n"
        f"Doctor: {provider.name}\n"
        f"Date: {_format_date(booking.date)}\n"
        f"Time: {format_time(booking.time_slot)}\n"
        f"Patient: {booking.client_name}\n\n"
        "Thank you for booking with us! 🏥"
    )


def format_cancellation(booking: Bookings, provider: Providers) -> str:
    return (
        "❌ Appointment Cancelled\n\n"
        f"Your appointment with {provider.name} on {_format_date(booking.date)} "
        f"at {format_time(booking.time_slot)} has been cancelled.\n\n"
        "Please book a new appointment if needed. 🏥"
    )
