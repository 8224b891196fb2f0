"""
Booking event handlers.

Handles: booking_created, booking_cancelled.
"""

import logging

from . import register_event

logger = logging.getLogger(__name__)


@register_event("booking_created")
async def handle_booking_created(data: dict) -> None:
    """New booking: send the confirmation to the client."""
    from .dispatcher import get_dispatcher

    booking_id = data.get("booking_id")
    if not booking_id:
        logger.error("booking_created event without booking_id")
        return

    await get_dispatcher().send_booking_confirmation(booking_id)


@register_event("booking_cancelled")
async def handle_booking_cancelled(data: dict) -> None:
    """Booking cancelled by the provider: tell the client."""
    from .dispatcher import get_dispatcher

    booking_id = data.get("booking_id")
    if not booking_id:
        logger.error("booking_cancelled event without booking_id")
        return

    await get_dispatcher().send_cancellation_notification(booking_id)
